"""Rutas de reserva de asientos"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict
import logging

from shared.database.connection import get_db
from shared.auth.dependencies import get_current_student
from shared.utils.rate_limiter import limiter, RATE_LIMITS
from services.booking.models.booking import (
    BookingRequest,
    BookingResponse,
    BookedShowInfo,
    MyBookingResponse,
    MyBookingsListResponse,
    CancelBookingResponse
)
from services.booking.services.allocation_service import AllocationService
from services.booking.services.booking_query_service import BookingQueryService
from services.booking.services.cancellation_service import CancellationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["booking"])
async def create_booking(
    request: Request,  # Necesario para rate limiter
    booking_request: BookingRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_student)
):
    """
    Reservar un asiento y recibir el ticket

    El estudiante y su género vienen del token; la respuesta incluye el
    ticket firmado, su QR (data URI) y la URL de validación.
    """
    booking, issued = await AllocationService.allocate(
        db,
        student_id=current_user["user_id"],
        student_gender=current_user["gender"],
        show_id=booking_request.show_id,
        seat_label=booking_request.seat_label
    )

    return BookingResponse(
        bookingId=str(booking.id),
        showId=str(booking.show_id),
        seatLabel=booking.seat_label,
        createdAt=booking.created_at,
        ticketId=issued.ticket_id,
        token=issued.token,
        scannableCode=issued.scannable_code,
        validationUrl=issued.validation_url
    )


@router.get("/my-bookings", response_model=MyBookingsListResponse)
async def get_my_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_student)
):
    """Reservas del estudiante autenticado"""
    rows = await BookingQueryService.list_bookings(db, student_id=current_user["user_id"])

    return MyBookingsListResponse(
        bookings=[
            MyBookingResponse(
                bookingId=str(booking.id),
                seatLabel=booking.seat_label,
                createdAt=booking.created_at,
                show=BookedShowInfo(
                    id=str(show.id),
                    movie=show.movie,
                    date=show.date,
                    time=show.time,
                    allowed_gender=show.allowed_gender
                ),
                ticketId=ticket.id if ticket else None,
                ticketStatus=ticket.status if ticket else None
            )
            for booking, show, ticket in rows
        ]
    )


@router.delete("/{booking_id}", response_model=CancelBookingResponse)
async def cancel_booking(
    booking_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_student)
):
    """
    Cancelar una reserva propia

    Libera el asiento y anula el ticket si no fue usado
    """
    await CancellationService.cancel(db, booking_id, current_user["user_id"])
    return CancelBookingResponse(message="Reserva cancelada", bookingId=booking_id)
