"""Servicio de cancelación de reservas"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from uuid import UUID
import logging

from shared.database.models import Booking, Ticket, TICKET_STATUS_ISSUED, TICKET_STATUS_VOID, utcnow
from shared.utils.errors import BookingNotFound, NotAuthorized

logger = logging.getLogger(__name__)


class CancellationService:
    """Servicio para revertir una asignación y anular su ticket"""

    @staticmethod
    async def cancel(db: AsyncSession, booking_id: str, requester_id: str) -> None:
        """
        Cancelar una reserva del propio estudiante

        Primero se elimina la reserva (el asiento queda libre) y luego se anula
        el ticket. Si el segundo paso falla, el ticket huérfano lo anula el
        barrido de reconciliación; el CAS del validador impide reusarlo igual.

        Raises:
            BookingNotFound: no existe (incluye doble cancelación)
            NotAuthorized: la reserva es de otro estudiante
        """
        try:
            booking_uuid = UUID(str(booking_id))
        except ValueError:
            raise BookingNotFound()

        result = await db.execute(select(Booking).where(Booking.id == booking_uuid))
        booking = result.scalar_one_or_none()
        if not booking:
            raise BookingNotFound()

        if str(booking.student_id) != str(requester_id):
            logger.warning(f"Estudiante {requester_id} intentó cancelar la reserva {booking_id} de otro estudiante")
            raise NotAuthorized()

        result = await db.execute(
            delete(Booking)
            .where(Booking.id == booking_uuid)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Cancelación concurrente ganó la carrera
            await db.rollback()
            raise BookingNotFound()
        await db.commit()

        logger.info(f"Reserva {booking_id} cancelada por {requester_id}")

        try:
            voided = await CancellationService.void_ticket_for_booking(db, booking_uuid)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"No se pudo anular el ticket de la reserva {booking_id}; "
                f"queda para el barrido de reconciliación: {e}",
                exc_info=True
            )
            return

        if not voided:
            logger.info(f"Reserva {booking_id} sin ticket emitido pendiente (ya usado o anulado)")

    @staticmethod
    async def void_ticket_for_booking(db: AsyncSession, booking_id: UUID) -> int:
        """Anular el ticket de una reserva si sigue issued (los usados quedan como historial)"""
        result = await db.execute(
            update(Ticket)
            .where(Ticket.booking_id == booking_id, Ticket.status == TICKET_STATUS_ISSUED)
            .values(status=TICKET_STATUS_VOID, voided_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount

    @staticmethod
    async def reconcile_orphan_tickets(db: AsyncSession) -> int:
        """
        Anular todos los tickets issued cuya reserva ya no existe

        Returns:
            Cantidad de tickets anulados
        """
        existing_bookings = select(Booking.id)
        result = await db.execute(
            update(Ticket)
            .where(
                Ticket.status == TICKET_STATUS_ISSUED,
                Ticket.booking_id.is_not(None),
                Ticket.booking_id.not_in(existing_bookings)
            )
            .values(status=TICKET_STATUS_VOID, voided_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        if result.rowcount:
            logger.warning(f"Reconciliación: {result.rowcount} tickets huérfanos anulados")
        else:
            logger.info("Reconciliación: sin tickets huérfanos")
        return result.rowcount
