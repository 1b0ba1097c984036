"""Rutas de administración"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Optional
import logging

from shared.database.connection import get_db
from shared.auth.dependencies import get_current_admin
from services.admin.models.admin import (
    DashboardStatsResponse,
    AdminBookingResponse,
    AdminBookingsListResponse,
    ReconcileResponse,
    CreateDamageReportRequest,
    UpdateDamageReportStatusRequest,
    DamageReportResponse,
    DamageReportsListResponse
)
from services.admin.services.stats_service import StatsService
from services.admin.services.damage_report_service import DamageReportService
from services.booking.services.booking_query_service import BookingQueryService
from services.booking.services.cancellation_service import CancellationService

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== STATS ====================

@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Obtener estadísticas del dashboard

    Requiere autenticación de admin
    """
    return DashboardStatsResponse(**await StatsService.get_dashboard_stats(db))


# ==================== BOOKINGS ====================

@router.get("/bookings", response_model=AdminBookingsListResponse)
async def get_all_bookings(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Listar todas las reservas, más recientes primero

    Requiere autenticación de admin
    """
    rows = await BookingQueryService.list_bookings(db, limit=limit, offset=offset)

    bookings = [
        AdminBookingResponse(
            id=str(booking.id),
            student_id=booking.student_id,
            seat_label=booking.seat_label,
            created_at=booking.created_at,
            show_id=str(show.id),
            movie=show.movie,
            date=show.date,
            time=show.time,
            ticket_id=ticket.id if ticket else None,
            ticket_status=ticket.status if ticket else None
        )
        for booking, show, ticket in rows
    ]
    total = await BookingQueryService.count_bookings(db)
    return AdminBookingsListResponse(bookings=bookings, total=total)


# ==================== TICKETS ====================

@router.post("/tickets/reconcile", response_model=ReconcileResponse)
async def reconcile_tickets(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Anular tickets issued cuya reserva ya no existe

    Requiere autenticación de admin
    """
    voided = await CancellationService.reconcile_orphan_tickets(db)
    logger.info(f"Reconciliación manual por {current_user['user_id']}: {voided} tickets anulados")
    return ReconcileResponse(voided_tickets=voided)


# ==================== DAMAGE REPORTS ====================

def _damage_report_response(report, show=None) -> DamageReportResponse:
    return DamageReportResponse(
        id=str(report.id),
        show_id=str(report.show_id),
        movie=show.movie if show else None,
        date=show.date if show else None,
        time=show.time if show else None,
        seat_label=report.seat_label,
        description=report.description,
        photo_url=report.photo_url,
        reported_by=report.reported_by,
        status=report.status,
        created_at=report.created_at
    )


@router.get("/damage-reports", response_model=DamageReportsListResponse)
async def list_damage_reports(
    report_status: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Listar reportes de daño, más recientes primero

    Requiere autenticación de admin
    """
    rows = await DamageReportService.list_reports(db, status=report_status)
    return DamageReportsListResponse(
        reports=[_damage_report_response(report, show) for report, show in rows]
    )


@router.post("/damage-reports", response_model=DamageReportResponse, status_code=status.HTTP_201_CREATED)
async def create_damage_report(
    request: CreateDamageReportRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Registrar un reporte de daño de un asiento

    photoUrl es una referencia externa; la API no almacena fotos.
    Requiere autenticación de admin
    """
    report = await DamageReportService.create_report(
        db,
        show_id=request.show_id,
        seat_label=request.seat_label,
        description=request.description,
        reported_by=current_user["user_id"],
        photo_url=request.photo_url
    )
    return _damage_report_response(report)


@router.put("/damage-reports/{report_id}/status", response_model=DamageReportResponse)
async def update_damage_report_status(
    report_id: str,
    request: UpdateDamageReportStatusRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Cambiar el estado de un reporte (pending, investigating, resolved)

    Requiere autenticación de admin
    """
    report = await DamageReportService.update_status(db, report_id, request.status)
    return _damage_report_response(report)
