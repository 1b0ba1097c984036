"""Firma y verificación de tokens de ticket

El token es un JWT (HS256) con el id de la clave en el header (`kid`) y el
payload {tid, eid, uid, iat, exp}. La verificación es local: no consulta la
base de datos, así que rechazar un token falsificado o expirado es barato.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from jose.utils import base64url_decode, base64url_encode

from app.core.config import settings

TICKET_TOKEN_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("tid", "eid", "uid", "exp")


class TicketTokenError(Exception):
    """Token de ticket ilegible, alterado o firmado con una clave desconocida"""
    reason = "invalid"


class TicketTokenExpired(TicketTokenError):
    reason = "expired"


def _signing_keys() -> Dict[str, str]:
    return settings.TICKET_SIGNING_KEYS


def sign_ticket_token(
    ticket_id: str,
    event_id: str,
    user_id: str,
    ttl: Optional[timedelta] = None,
    kid: Optional[str] = None
) -> str:
    """Firmar token de ticket con la clave activa"""
    kid = kid or settings.TICKET_ACTIVE_KID
    keys = _signing_keys()
    if kid not in keys:
        raise RuntimeError(f"Clave de firma de tickets no configurada: {kid}")

    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (ttl if ttl is not None else timedelta(days=settings.TICKET_TTL_DAYS))
    payload = {
        "tid": ticket_id,
        "eid": event_id,
        "uid": user_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, keys[kid], algorithm=TICKET_TOKEN_ALGORITHM, headers={"kid": kid})


def _is_canonical(token: str) -> bool:
    """
    Cada segmento debe ser exactamente la codificación base64url de sus bytes.

    base64 ignora los bits de relleno del último carácter, así que sin esto
    dos strings distintos pueden verificar con la misma firma.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        for segment in segments:
            raw = segment.encode("ascii")
            if base64url_encode(base64url_decode(raw)) != raw:
                return False
    except (ValueError, UnicodeError):
        return False
    return True


def verify_ticket_token(token: str) -> Dict:
    """
    Verificar firma, clave y expiración de un token de ticket

    Returns:
        Payload con tid, eid, uid, iat, exp

    Raises:
        TicketTokenExpired: token auténtico pero expirado
        TicketTokenError: cualquier otro problema
    """
    if not token or not _is_canonical(token):
        raise TicketTokenError("Token mal formado")

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise TicketTokenError(str(e))

    key = _signing_keys().get(header.get("kid"))
    if key is None:
        raise TicketTokenError("Clave de firma desconocida")

    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[TICKET_TOKEN_ALGORITHM],
            options={"require_exp": True},
        )
    except ExpiredSignatureError as e:
        raise TicketTokenExpired(str(e))
    except JWTError as e:
        raise TicketTokenError(str(e))

    for claim in REQUIRED_CLAIMS:
        if not payload.get(claim):
            raise TicketTokenError(f"Falta claim: {claim}")

    return payload
