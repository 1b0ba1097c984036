"""Modelos Pydantic para administración"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime


# ==================== STATS ====================

class DashboardStatsResponse(BaseModel):
    """Respuesta con estadísticas del dashboard"""
    total_shows: int
    total_bookings: int
    tickets_by_status: Dict[str, int]
    validations_by_result: Dict[str, int]
    pending_damage_reports: int


# ==================== BOOKINGS ====================

class AdminBookingResponse(BaseModel):
    """Reserva vista por el admin"""
    id: str
    student_id: str
    seat_label: str
    created_at: datetime
    show_id: str
    movie: str
    date: str
    time: str
    ticket_id: Optional[str] = None
    ticket_status: Optional[str] = None


class AdminBookingsListResponse(BaseModel):
    bookings: List[AdminBookingResponse]
    total: int


# ==================== RECONCILIATION ====================

class ReconcileResponse(BaseModel):
    voided_tickets: int


# ==================== DAMAGE REPORTS ====================

DamageReportStatus = Literal["pending", "investigating", "resolved"]


class CreateDamageReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    show_id: str = Field(..., alias="showId", min_length=1)
    seat_label: str = Field(..., alias="seatLabel", min_length=1)
    description: str = Field(..., min_length=1)
    photo_url: Optional[str] = Field(None, alias="photoUrl")


class UpdateDamageReportStatusRequest(BaseModel):
    status: DamageReportStatus


class DamageReportResponse(BaseModel):
    id: str
    show_id: str
    movie: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    seat_label: str
    description: str
    photo_url: Optional[str] = None
    reported_by: str
    status: str
    created_at: datetime


class DamageReportsListResponse(BaseModel):
    reports: List[DamageReportResponse]
