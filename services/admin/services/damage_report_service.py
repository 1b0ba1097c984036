"""Servicio de reportes de daño de asientos"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from shared.database.models import DamageReport, Show, DAMAGE_REPORT_PENDING, utcnow
from shared.utils.errors import ShowNotFound, DamageReportNotFound
from services.catalog.services.seating import check_seat_in_range
from services.catalog.services.show_service import ShowService

logger = logging.getLogger(__name__)


class DamageReportService:
    """Registro y seguimiento de daños reportados por asiento"""

    @staticmethod
    async def create_report(
        db: AsyncSession,
        show_id,
        seat_label: str,
        description: str,
        reported_by: str,
        photo_url: Optional[str] = None
    ) -> DamageReport:
        """
        Registrar un reporte de daño en estado pending

        No marca el asiento como dañado; eso se hace aparte con
        set_damaged_seats una vez revisado el reporte.

        Raises:
            ShowNotFound, InvalidSeatFormat, SeatOutOfRange
        """
        show = await ShowService.get_show(db, show_id)
        if not show:
            raise ShowNotFound()
        check_seat_in_range(show.rows, show.seat_bands, seat_label)

        report = DamageReport(
            show_id=show.id,
            seat_label=seat_label,
            description=description.strip(),
            photo_url=photo_url,
            reported_by=reported_by,
            status=DAMAGE_REPORT_PENDING,
            created_at=utcnow()
        )
        db.add(report)
        await db.commit()

        logger.info(f"Reporte de daño {report.id} creado: show={show.id} seat={seat_label} por {reported_by}")
        return report

    @staticmethod
    async def list_reports(
        db: AsyncSession,
        status: Optional[str] = None
    ) -> List[Tuple[DamageReport, Show]]:
        """Reportes con su función, más recientes primero"""
        stmt = (
            select(DamageReport, Show)
            .join(Show, DamageReport.show_id == Show.id)
            .order_by(DamageReport.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(DamageReport.status == status)

        result = await db.execute(stmt)
        return [(report, show) for report, show in result.all()]

    @staticmethod
    async def update_status(db: AsyncSession, report_id: str, status: str) -> DamageReport:
        """Cambiar el estado de seguimiento de un reporte"""
        try:
            report_uuid = UUID(str(report_id))
        except ValueError:
            raise DamageReportNotFound()

        result = await db.execute(
            update(DamageReport)
            .where(DamageReport.id == report_uuid)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise DamageReportNotFound()
        await db.commit()

        logger.info(f"Reporte de daño {report_id} -> {status}")
        result = await db.execute(
            select(DamageReport)
            .where(DamageReport.id == report_uuid)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
