"""Errores de dominio de reservas y tickets

Cada error lleva un código legible por máquina y el status HTTP con el que
se expone. Los conflictos de concurrencia (constraint único, CAS sin filas)
se traducen a estos mismos errores: reintentar no cambia el resultado.
"""
from fastapi import Request
from starlette.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class BookingSystemError(Exception):
    """Base de los errores de dominio"""
    code = "error"
    status_code = 400
    default_detail = "Solicitud rechazada"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# ==================== INPUT ====================

class BadRequest(BookingSystemError):
    code = "bad-request"
    status_code = 400
    default_detail = "Solicitud inválida"


class InvalidSeatFormat(BookingSystemError):
    code = "invalid-seat-format"
    status_code = 400
    default_detail = "Formato de asiento inválido. Usa el formato A-1, B-5, etc."


class SeatOutOfRange(BookingSystemError):
    code = "seat-out-of-range"
    status_code = 400
    default_detail = "Asiento fuera del rango de la sala"


# ==================== POLÍTICAS DE RESERVA ====================

class ShowNotFound(BookingSystemError):
    code = "show-not-found"
    status_code = 404
    default_detail = "Función no encontrada"


class AccessDenied(BookingSystemError):
    code = "access-denied"
    status_code = 403
    default_detail = "No tienes permitido reservar en esta función"


class DuplicateStudentBooking(BookingSystemError):
    code = "duplicate-booking"
    status_code = 409
    default_detail = "Ya tienes un asiento reservado para esta función. Sólo se permite uno por estudiante."


class SeatTaken(BookingSystemError):
    code = "seat-taken"
    status_code = 409
    default_detail = "El asiento ya está reservado"


class SeatDamaged(BookingSystemError):
    code = "seat-damaged"
    status_code = 400
    default_detail = "El asiento está dañado y no se puede reservar"


class BookingNotFound(BookingSystemError):
    code = "not-found"
    status_code = 404
    default_detail = "Reserva no encontrada"


class NotAuthorized(BookingSystemError):
    code = "not-authorized"
    status_code = 403
    default_detail = "No estás autorizado para cancelar esta reserva"


# ==================== ADMIN ====================

class ConcurrentUpdateConflict(BookingSystemError):
    code = "conflict"
    status_code = 409
    default_detail = "La función fue modificada concurrentemente, intenta nuevamente"


class DamageReportNotFound(BookingSystemError):
    code = "not-found"
    status_code = 404
    default_detail = "Reporte de daño no encontrado"


# ==================== TICKETS ====================

class TokenInvalid(BookingSystemError):
    code = "invalid"
    status_code = 401
    default_detail = "Token inválido"


class TokenExpired(BookingSystemError):
    code = "expired"
    status_code = 401
    default_detail = "Token expirado"


class TicketNotFound(BookingSystemError):
    code = "not-found"
    status_code = 404
    default_detail = "Ticket no encontrado"


class AlreadyUsed(BookingSystemError):
    code = "already-used"
    status_code = 409
    default_detail = "Ticket ya utilizado"


async def booking_error_handler(request: Request, exc: BookingSystemError) -> JSONResponse:
    """Handler para errores de dominio: {code, detail} con su status HTTP"""
    logger.info(f"{request.method} {request.url.path} rechazado: {exc.code} ({exc.detail})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
    )
