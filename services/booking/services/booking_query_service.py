"""Consultas de reservas (estudiante y admin)"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional, Tuple

from shared.database.models import Booking, Show, Ticket


class BookingQueryService:
    """Lecturas de reservas con su función y ticket"""

    @staticmethod
    async def list_bookings(
        db: AsyncSession,
        student_id: Optional[str] = None,
        limit: int = 500,
        offset: int = 0
    ) -> List[Tuple[Booking, Show, Optional[Ticket]]]:
        """
        Reservas con función y ticket, más recientes primero

        Sin student_id devuelve todas (vista de admin)
        """
        stmt = (
            select(Booking, Show, Ticket)
            .join(Show, Booking.show_id == Show.id)
            .outerjoin(Ticket, Ticket.booking_id == Booking.id)
            .order_by(Booking.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if student_id is not None:
            stmt = stmt.where(Booking.student_id == student_id)

        result = await db.execute(stmt)
        return [(booking, show, ticket) for booking, show, ticket in result.all()]

    @staticmethod
    async def count_bookings(db: AsyncSession, student_id: Optional[str] = None) -> int:
        """Total de reservas (independiente de la paginación)"""
        stmt = select(func.count(Booking.id))
        if student_id is not None:
            stmt = stmt.where(Booking.student_id == student_id)
        return (await db.execute(stmt)).scalar() or 0
