"""Servicio de emisión de tickets"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote
from uuid import UUID
import logging
import secrets

from app.core.config import settings
from shared.database.models import Ticket, ValidationLogEntry, TICKET_STATUS_ISSUED, utcnow
from shared.utils.qr_generator import generate_qr_data_uri
from shared.utils.ticket_token import sign_ticket_token

logger = logging.getLogger(__name__)


@dataclass
class IssuedTicket:
    ticket_id: str
    token: str
    scannable_code: str  # data:image/png;base64,...
    validation_url: str


def generate_ticket_id() -> str:
    """ID impredecible del ticket, distinto del id de la reserva"""
    return f"TICK_{secrets.token_hex(8)}"


def build_validation_url(token: str) -> str:
    return f"{settings.API_HOST.rstrip('/')}/api/v1/tickets/validate?token={quote(token, safe='')}"


class TicketService:
    """Servicio para emitir y consultar tickets"""

    @staticmethod
    async def issue(
        db: AsyncSession,
        event_id: str,
        user_id: str,
        metadata: Optional[Dict] = None,
        booking_id: Optional[UUID] = None,
        commit: bool = True
    ) -> IssuedTicket:
        """
        Emitir un ticket firmado

        Persiste el ticket en estado issued y devuelve el token junto con su QR.
        Con commit=False el ticket queda en la transacción del llamador (la
        reserva y su ticket se confirman juntos).
        """
        ticket_id = generate_ticket_id()
        event_id = str(event_id)
        user_id = str(user_id)

        token = sign_ticket_token(ticket_id, event_id, user_id)
        validation_url = build_validation_url(token)

        ticket = Ticket(
            id=ticket_id,
            booking_id=booking_id,
            event_id=event_id,
            user_id=user_id,
            ticket_metadata=metadata or {},
            status=TICKET_STATUS_ISSUED,
            issued_at=utcnow()
        )
        db.add(ticket)

        if commit:
            await db.commit()
        else:
            await db.flush()

        logger.info(f"Ticket {ticket_id} emitido para evento {event_id}, usuario {user_id}")

        return IssuedTicket(
            ticket_id=ticket_id,
            token=token,
            scannable_code=generate_qr_data_uri(validation_url),
            validation_url=validation_url
        )

    @staticmethod
    async def get_ticket_by_id(db: AsyncSession, ticket_id: str) -> Optional[Ticket]:
        """Obtener ticket por ID (siempre con el estado actual de la fila)"""
        # Los cambios de estado son UPDATEs directos que no sincronizan la sesión
        result = await db.execute(
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_ticket_with_logs(
        db: AsyncSession,
        ticket_id: str,
        limit: Optional[int] = None
    ) -> Tuple[Optional[Ticket], List[ValidationLogEntry]]:
        """Ticket y sus últimos intentos de validación (más recientes primero)"""
        ticket = await TicketService.get_ticket_by_id(db, ticket_id)
        if not ticket:
            return None, []

        stmt = (
            select(ValidationLogEntry)
            .where(ValidationLogEntry.ticket_id == ticket_id)
            .order_by(ValidationLogEntry.created_at.desc(), ValidationLogEntry.id.desc())
            .limit(limit or settings.TICKET_AUDIT_LOG_LIMIT)
        )
        result = await db.execute(stmt)
        return ticket, list(result.scalars().all())
