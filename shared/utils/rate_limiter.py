"""
Rate limiting usando slowapi

Con RATE_LIMIT_STORAGE_URI=redis://... el límite se comparte entre todas
las instancias de la API.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, Response
from starlette.responses import JSONResponse
import hashlib
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """
    Obtener IP real del cliente.

    Los headers de proxy sólo se consideran con TRUST_PROXY_HEADERS activo
    (API detrás de nginx/cloudflare); de lo contrario cualquier cliente
    podría rotar su identidad para saltarse el límite.
    """
    if settings.TRUST_PROXY_HEADERS:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # X-Forwarded-For puede tener múltiples IPs: client, proxy1, proxy2
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        cf_connecting_ip = request.headers.get("CF-Connecting-IP")
        if cf_connecting_ip:
            return cf_connecting_ip

    return get_remote_address(request)


def get_user_identifier(request: Request) -> str:
    """
    Identificador para límites de operaciones autenticadas.
    Combina IP + hash del token si hay Authorization.
    """
    ip = get_real_client_ip(request)

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token_hash = hashlib.sha256(auth_header.encode()).hexdigest()[:8]
        return f"{ip}:{token_hash}"

    return ip


limiter = Limiter(
    key_func=get_user_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    headers_enabled=False,  # Deshabilitado para compatibilidad con response_model de FastAPI
)
logger.info(
    f"Rate limiter inicializado con storage: "
    f"{settings.RATE_LIMIT_STORAGE_URI.split('@')[-1]}"
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Handler personalizado para rate limit exceeded.
    Retorna JSON con información útil para el cliente.
    """
    retry_after = "60"
    if exc.limit is not None:
        retry_after = str(exc.limit.limit.get_expiry())

    logger.warning(
        f"Rate limit exceeded - IP: {get_real_client_ip(request)}, "
        f"Path: {request.url.path}, "
        f"Retry-After: {retry_after}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "code": "rate_limit_exceeded",
            "detail": "Demasiadas solicitudes. Por favor espera antes de intentar nuevamente.",
            "retry_after_seconds": int(retry_after),
        },
        headers={"Retry-After": retry_after},
    )


# Límites específicos por tipo de operación
RATE_LIMITS = {
    # Validación de tickets: por IP, para frenar la adivinación de tokens
    "validation": settings.RATE_LIMIT_VALIDATION,

    # Reservas: por IP + principal
    "booking": settings.RATE_LIMIT_BOOKING,
}
