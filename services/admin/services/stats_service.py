"""Servicio de estadísticas para el dashboard de admin"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Dict

from shared.database.models import Show, Booking, Ticket, ValidationLogEntry, DamageReport, DAMAGE_REPORT_PENDING


class StatsService:
    """Servicio para obtener estadísticas"""

    @staticmethod
    async def get_dashboard_stats(db: AsyncSession) -> Dict:
        """
        Totales de funciones y reservas, tickets por estado,
        validaciones por resultado, y reportes de daño pendientes
        """
        total_shows = (await db.execute(select(func.count(Show.id)))).scalar() or 0
        total_bookings = (await db.execute(select(func.count(Booking.id)))).scalar() or 0

        result = await db.execute(
            select(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status)
        )
        tickets_by_status = {row_status: count for row_status, count in result.all()}

        result = await db.execute(
            select(ValidationLogEntry.result, func.count(ValidationLogEntry.id))
            .group_by(ValidationLogEntry.result)
        )
        validations_by_result = {row_result: count for row_result, count in result.all()}

        pending_damage_reports = (await db.execute(
            select(func.count(DamageReport.id)).where(DamageReport.status == DAMAGE_REPORT_PENDING)
        )).scalar() or 0

        return {
            "total_shows": total_shows,
            "total_bookings": total_bookings,
            "tickets_by_status": tickets_by_status,
            "validations_by_result": validations_by_result,
            "pending_damage_reports": pending_damage_reports
        }
