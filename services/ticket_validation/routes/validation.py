"""Rutas de emisión y validación de tickets"""
from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Optional

from shared.database.connection import get_db
from shared.auth.dependencies import get_current_admin
from shared.utils.errors import BadRequest, TicketNotFound
from shared.utils.rate_limiter import limiter, RATE_LIMITS, get_real_client_ip
from services.ticket_validation.models.ticket import (
    TicketValidationRequest,
    TicketValidationResponse,
    CreateTicketRequest,
    IssuedTicketResponse,
    TicketInfo,
    ValidationLogInfo,
    TicketDetailResponse
)
from services.ticket_validation.services.ticket_service import TicketService
from services.ticket_validation.services.validation_service import TicketValidationService


router = APIRouter()


@router.post("/validate", response_model=TicketValidationResponse)
@limiter.limit(RATE_LIMITS["validation"], key_func=get_real_client_ip)
async def validate_ticket(
    request: Request,  # Necesario para rate limiter
    validation_request: Optional[TicketValidationRequest] = Body(None),
    token: Optional[str] = Query(None),
    scanner_id: Optional[str] = Query(None, alias="scannerId"),
    db: AsyncSession = Depends(get_db)
):
    """
    Validar y consumir un ticket

    El token puede venir en el body o como query param (la URL del QR lo
    trae así). Endpoint público, limitado por IP.
    """
    if validation_request is not None:
        token = validation_request.token or token
        scanner_id = validation_request.scanner_id or scanner_id

    if not token:
        raise BadRequest("token es requerido")

    result = await TicketValidationService.validate(
        db,
        token=token,
        scanner_id=scanner_id,
        client_ip=get_real_client_ip(request)
    )

    return TicketValidationResponse(
        ticketId=result["ticket_id"],
        eventId=result["event_id"],
        userId=result["user_id"]
    )


@router.post("/create", response_model=IssuedTicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket_request: CreateTicketRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Emitir un ticket suelto (sin reserva)

    Requiere autenticación de admin
    """
    issued = await TicketService.issue(
        db,
        event_id=ticket_request.event_id,
        user_id=ticket_request.user_id,
        metadata={**ticket_request.metadata, "issued_by": current_user["user_id"]}
    )
    return IssuedTicketResponse(
        ticketId=issued.ticket_id,
        token=issued.token,
        scannableCode=issued.scannable_code,
        validationUrl=issued.validation_url
    )


@router.get("/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket(
    ticket_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Obtener ticket y sus últimos intentos de validación

    Requiere autenticación de admin
    """
    ticket, logs = await TicketService.get_ticket_with_logs(db, ticket_id)
    if not ticket:
        raise TicketNotFound()

    return TicketDetailResponse(
        ticket=TicketInfo(
            id=ticket.id,
            booking_id=str(ticket.booking_id) if ticket.booking_id else None,
            event_id=ticket.event_id,
            user_id=ticket.user_id,
            status=ticket.status,
            metadata=ticket.ticket_metadata or {},
            issued_at=ticket.issued_at,
            used_at=ticket.used_at,
            voided_at=ticket.voided_at,
            scanned_by=ticket.scanned_by
        ),
        logs=[
            ValidationLogInfo(
                ticket_id=entry.ticket_id,
                ip=entry.ip,
                scanner_id=entry.scanner_id,
                result=entry.result,
                reason=entry.reason,
                created_at=entry.created_at
            )
            for entry in logs
        ]
    )
