"""Ledger de asignación de asientos

Invariantes: como máximo una reserva por (función, asiento) y por
(función, estudiante). Las verificaciones previas dan errores precisos, pero
quien garantiza las invariantes bajo concurrencia son los constraints únicos
de la tabla bookings: si dos requests pasan las verificaciones a la vez, la
base de datos rechaza la segunda inserción y aquí se traduce el conflicto.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from typing import Optional, Tuple
import logging
import uuid

from shared.database.models import Booking, Show, utcnow
from shared.utils.errors import (
    ShowNotFound,
    AccessDenied,
    DuplicateStudentBooking,
    SeatTaken,
    SeatDamaged
)
from services.catalog.services.seating import check_seat_in_range
from services.catalog.services.show_service import ShowService
from services.ticket_validation.services.ticket_service import TicketService, IssuedTicket

logger = logging.getLogger(__name__)


STUDENT_CONSTRAINT = "uq_bookings_show_student"
SEAT_CONSTRAINT = "uq_bookings_show_seat"


def violated_constraint_name(error: IntegrityError) -> Optional[str]:
    """Nombre del constraint violado si el driver lo expone (asyncpg: UniqueViolationError)"""
    for source in (error.orig, getattr(error.orig, "__cause__", None)):
        name = getattr(source, "constraint_name", None)
        if name:
            return name
    return None


def translate_booking_conflict(error: IntegrityError):
    """
    Traducir la violación de un constraint único a su error de dominio

    Con asyncpg se usa el nombre del constraint. SQLite sólo reporta las
    columnas en el mensaje (bookings.show_id, bookings.student_id), que
    mencionan "student" sólo para el constraint por estudiante.
    """
    name = violated_constraint_name(error)
    if name == STUDENT_CONSTRAINT:
        return DuplicateStudentBooking()
    if name == SEAT_CONSTRAINT:
        return SeatTaken()

    message = str(error.orig).lower()
    if "student" in message:
        return DuplicateStudentBooking()
    return SeatTaken()


class AllocationService:
    """Servicio para asignar asientos a estudiantes"""

    @staticmethod
    async def check_allocation(
        db: AsyncSession,
        student_id: str,
        student_gender: str,
        show_id,
        seat_label: str
    ) -> Show:
        """
        Verificar las precondiciones de la reserva en orden

        Raises:
            ShowNotFound, AccessDenied, DuplicateStudentBooking, SeatTaken,
            InvalidSeatFormat, SeatOutOfRange, SeatDamaged
        """
        show = await ShowService.get_show(db, show_id)
        if not show:
            raise ShowNotFound()

        # Regla de negocio dura: nunca se salta
        if show.allowed_gender != student_gender:
            raise AccessDenied()

        stmt = select(Booking.id).where(
            Booking.show_id == show.id,
            Booking.student_id == student_id
        )
        if (await db.execute(stmt)).first():
            raise DuplicateStudentBooking()

        stmt = select(Booking.id).where(
            Booking.show_id == show.id,
            Booking.seat_label == seat_label
        )
        if (await db.execute(stmt)).first():
            raise SeatTaken()

        check_seat_in_range(show.rows, show.seat_bands, seat_label)

        if seat_label in (show.damaged_seats or []):
            raise SeatDamaged()

        return show

    @staticmethod
    async def insert_booking(
        db: AsyncSession,
        student_id: str,
        show: Show,
        seat_label: str
    ) -> Tuple[Booking, IssuedTicket]:
        """
        Insertar la reserva y emitir su ticket en una sola transacción

        Raises:
            SeatTaken / DuplicateStudentBooking si un constraint único rechaza la inserción
        """
        show_id = show.id
        booking = Booking(
            id=uuid.uuid4(),
            student_id=student_id,
            show_id=show_id,
            seat_label=seat_label,
            created_at=utcnow()
        )
        db.add(booking)

        try:
            await db.flush()
            issued = await TicketService.issue(
                db,
                event_id=str(show_id),
                user_id=student_id,
                metadata={"booking_id": str(booking.id), "seat_label": seat_label},
                booking_id=booking.id,
                commit=False
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            conflict = translate_booking_conflict(e)
            logger.info(
                f"Conflicto de reserva resuelto por la base de datos: show={show_id} "
                f"seat={seat_label} student={student_id} -> {conflict.code}"
            )
            raise conflict

        return booking, issued

    @staticmethod
    async def allocate(
        db: AsyncSession,
        student_id: str,
        student_gender: str,
        show_id,
        seat_label: str
    ) -> Tuple[Booking, IssuedTicket]:
        """
        Asignar un asiento a un estudiante para una función

        Returns:
            (booking, ticket emitido)
        """
        show = await AllocationService.check_allocation(
            db, student_id, student_gender, show_id, seat_label
        )
        booking, issued = await AllocationService.insert_booking(db, student_id, show, seat_label)

        logger.info(
            f"Reserva {booking.id} creada: show={show.id} seat={seat_label} "
            f"student={student_id} ticket={issued.ticket_id}"
        )
        return booking, issued
