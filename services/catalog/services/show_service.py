"""Servicio del catálogo de funciones y asientos"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from shared.database.models import Show, Booking
from shared.utils.errors import ShowNotFound, ConcurrentUpdateConflict
from services.catalog.services.seating import check_seat_in_range, validate_seat_bands

logger = logging.getLogger(__name__)

DAMAGED_SEATS_MAX_ATTEMPTS = 5


def parse_show_id(show_id) -> Optional[UUID]:
    """Convertir un id de función a UUID (None si no es válido)"""
    if isinstance(show_id, UUID):
        return show_id
    try:
        return UUID(str(show_id))
    except ValueError:
        return None


class ShowService:
    """Servicio para leer y administrar funciones"""

    @staticmethod
    async def get_show(db: AsyncSession, show_id) -> Optional[Show]:
        """Obtener función por ID (None si no existe o el id es inválido)"""
        show_uuid = parse_show_id(show_id)
        if show_uuid is None:
            return None
        result = await db.execute(
            select(Show)
            .where(Show.id == show_uuid)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_shows_for_gender(db: AsyncSession, gender: str) -> List[Tuple[Show, int]]:
        """Funciones visibles para un género, con la cantidad de asientos reservados"""
        booked_count = (
            select(Booking.show_id, func.count(Booking.id).label("booked"))
            .group_by(Booking.show_id)
            .subquery()
        )
        stmt = (
            select(Show, func.coalesce(booked_count.c.booked, 0))
            .outerjoin(booked_count, booked_count.c.show_id == Show.id)
            .where(Show.allowed_gender == gender)
            .order_by(Show.date, Show.time)
        )
        result = await db.execute(stmt)
        return [(show, int(count)) for show, count in result.all()]

    @staticmethod
    async def get_seat_map(db: AsyncSession, show_id) -> Dict:
        """Geometría, asientos reservados y dañados de una función"""
        show = await ShowService.get_show(db, show_id)
        if not show:
            raise ShowNotFound()

        result = await db.execute(
            select(Booking.seat_label).where(Booking.show_id == show.id)
        )
        return {
            "show_id": str(show.id),
            "rows": show.rows,
            "seat_bands": show.seat_bands,
            "booked_seats": sorted(result.scalars().all()),
            "damaged_seats": list(show.damaged_seats or []),
        }

    @staticmethod
    async def create_show(db: AsyncSession, data: Dict) -> Show:
        """Crear función (admin). Valida bandas y asientos dañados contra la geometría"""
        validate_seat_bands(data["rows"], data["seat_bands"])
        for seat_label in data.get("damaged_seats", []):
            check_seat_in_range(data["rows"], data["seat_bands"], seat_label)

        show = Show(
            movie=data["movie"].strip(),
            date=data["date"],
            time=data["time"],
            allowed_gender=data["allowed_gender"],
            rows=data["rows"],
            seat_bands=data["seat_bands"],
            damaged_seats=sorted(set(data.get("damaged_seats", []))),
        )
        db.add(show)
        await db.commit()

        logger.info(f"Función creada: {show.id} ({show.movie} {show.date} {show.time}, {show.allowed_gender})")
        return show

    @staticmethod
    async def set_damaged_seats(
        db: AsyncSession,
        show_id,
        mark: List[str],
        unmark: List[str]
    ) -> Show:
        """
        Actualizar la lista de asientos dañados (admin)

        Las reservas existentes en asientos recién marcados no se tocan;
        el asiento sólo deja de ser reservable. La escritura es condicional
        a la versión leída; ante una escritura concurrente se relee y se
        reintenta.

        Raises:
            ShowNotFound, InvalidSeatFormat, SeatOutOfRange
            ConcurrentUpdateConflict: se agotaron los reintentos
        """
        for attempt in range(1, DAMAGED_SEATS_MAX_ATTEMPTS + 1):
            show = await ShowService.get_show(db, show_id)
            if not show:
                raise ShowNotFound()
            show_uuid, read_version = show.id, show.version

            for seat_label in list(mark) + list(unmark):
                check_seat_in_range(show.rows, show.seat_bands, seat_label)

            damaged = sorted((set(show.damaged_seats or []) | set(mark)) - set(unmark))

            # Compare-and-swap sobre version: sólo escribe si nadie cambió la lista desde la lectura
            result = await db.execute(
                update(Show)
                .where(Show.id == show_uuid, Show.version == read_version)
                .values(damaged_seats=damaged, version=read_version + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                await db.commit()
                logger.info(
                    f"Asientos dañados actualizados para función {show_uuid} (v{read_version + 1}): "
                    f"+{sorted(set(mark))} -{sorted(set(unmark))}"
                )
                return await ShowService.get_show(db, show_uuid)

            await db.rollback()
            logger.info(
                f"Conflicto de versión en asientos dañados de {show_uuid} "
                f"(intento {attempt}/{DAMAGED_SEATS_MAX_ATTEMPTS})"
            )

        logger.warning(f"Asientos dañados de {show_id} no actualizados: conflictos repetidos")
        raise ConcurrentUpdateConflict()
