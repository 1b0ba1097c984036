"""Modelos Pydantic para reservas"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class BookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    show_id: str = Field(..., alias="showId", min_length=1)
    seat_label: str = Field(..., alias="seatLabel", min_length=1)


class BookingResponse(BaseModel):
    """Reserva creada junto con su ticket"""
    bookingId: str
    showId: str
    seatLabel: str
    createdAt: datetime
    ticketId: str
    token: str
    scannableCode: str
    validationUrl: str


class BookedShowInfo(BaseModel):
    id: str
    movie: str
    date: str
    time: str
    allowed_gender: str


class MyBookingResponse(BaseModel):
    bookingId: str
    seatLabel: str
    createdAt: datetime
    show: BookedShowInfo
    ticketId: Optional[str] = None
    ticketStatus: Optional[str] = None


class MyBookingsListResponse(BaseModel):
    bookings: List[MyBookingResponse]


class CancelBookingResponse(BaseModel):
    message: str
    bookingId: str
