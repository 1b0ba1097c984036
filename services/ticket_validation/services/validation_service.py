"""Servicio de validación de tickets

Cada llamada a validate() agrega exactamente una entrada al log de
validaciones, sea cual sea el resultado. El consumo del ticket es un único
UPDATE condicional (status = 'issued'), así que entre N scanners
concurrentes con el mismo QR sólo uno obtiene ok.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from typing import Dict, Optional
import logging

from shared.database.models import (
    Ticket,
    ValidationLogEntry,
    TICKET_STATUS_ISSUED,
    TICKET_STATUS_USED,
    TICKET_STATUS_VOID,
    utcnow
)
from shared.utils.errors import TokenInvalid, TokenExpired, TicketNotFound, AlreadyUsed
from shared.utils.ticket_token import verify_ticket_token, TicketTokenError, TicketTokenExpired
from services.ticket_validation.services.ticket_service import TicketService

logger = logging.getLogger(__name__)

RESULT_OK = "ok"
RESULT_FAIL = "fail"


class TicketValidationService:
    """Servicio para validar y consumir tickets"""

    @staticmethod
    async def _log_attempt(
        db: AsyncSession,
        ticket_id: Optional[str],
        client_ip: Optional[str],
        scanner_id: Optional[str],
        result: str,
        reason: str
    ):
        """Agregar entrada de auditoría y confirmar la transacción"""
        db.add(ValidationLogEntry(
            ticket_id=ticket_id,
            ip=client_ip,
            scanner_id=scanner_id,
            result=result,
            reason=reason,
            created_at=utcnow()
        ))
        await db.commit()

    @staticmethod
    async def validate(
        db: AsyncSession,
        token: str,
        scanner_id: Optional[str],
        client_ip: Optional[str]
    ) -> Dict:
        """
        Validar y consumir un ticket

        Returns:
            dict con ok, ticket_id, event_id, user_id

        Raises:
            TokenInvalid, TokenExpired, TicketNotFound, AlreadyUsed
        """
        log = TicketValidationService._log_attempt

        # 1. Firma y expiración, sin tocar la tabla de tickets
        try:
            claims = verify_ticket_token(token)
        except TicketTokenExpired:
            await log(db, None, client_ip, scanner_id, RESULT_FAIL, "expired")
            logger.warning(f"Token expirado presentado por scanner={scanner_id} ip={client_ip}")
            raise TokenExpired()
        except TicketTokenError as e:
            await log(db, None, client_ip, scanner_id, RESULT_FAIL, "invalid")
            logger.warning(f"Token inválido presentado por scanner={scanner_id} ip={client_ip}: {e}")
            raise TokenInvalid()

        ticket_id = claims["tid"]

        # 2. Existencia
        ticket = await TicketService.get_ticket_by_id(db, ticket_id)
        if not ticket:
            await log(db, ticket_id, client_ip, scanner_id, RESULT_FAIL, "not-found")
            raise TicketNotFound()

        # 3. Estado terminal conocido
        if ticket.status == TICKET_STATUS_USED:
            await log(db, ticket_id, client_ip, scanner_id, RESULT_FAIL, "already-used")
            raise AlreadyUsed()
        if ticket.status == TICKET_STATUS_VOID:
            await log(db, ticket_id, client_ip, scanner_id, RESULT_FAIL, "void")
            raise AlreadyUsed("Ticket anulado")

        event_id, user_id = ticket.event_id, ticket.user_id

        # 4. Compare-and-swap: sólo pasa a used si sigue issued
        stmt = (
            update(Ticket)
            .where(Ticket.id == ticket_id, Ticket.status == TICKET_STATUS_ISSUED)
            .values(status=TICKET_STATUS_USED, used_at=utcnow(), scanned_by=scanner_id)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)

        if result.rowcount == 0:
            # Otro scanner lo consumió entre el paso 3 y el 4
            await db.rollback()
            await log(db, ticket_id, client_ip, scanner_id, RESULT_FAIL, "already-used")
            logger.info(f"Ticket {ticket_id} consumido concurrentemente, scanner={scanner_id}")
            raise AlreadyUsed()

        # 5. Éxito: el log se confirma en la misma transacción que el CAS
        await log(db, ticket_id, client_ip, scanner_id, RESULT_OK, "validated")
        logger.info(f"Ticket {ticket_id} validado por scanner={scanner_id}")

        return {
            "ok": True,
            "ticket_id": ticket_id,
            "event_id": event_id,
            "user_id": user_id
        }
