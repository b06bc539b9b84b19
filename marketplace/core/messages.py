"""User-facing messages and the error → message mapping used by every store."""
from typing import Optional

from marketplace.core.exceptions import (
    ApiError,
    AppException,
    ForbiddenError,
    MissingTokenError,
    NetworkError,
    NotFoundError,
    UnauthorizedError,
)

SESSION_EXPIRED = "Tu sesión ha expirado. Por favor, inicia sesión nuevamente."
MISSING_TOKEN = "No hay token de autenticación. Por favor, inicia sesión nuevamente."
FORBIDDEN = "No tienes permiso para realizar esta acción."
NOT_FOUND = "El recurso solicitado no fue encontrado."
NETWORK = "No se pudo conectar con el servidor. Verifica tu conexión a internet."
IN_PROGRESS = "Operación en progreso"
UNKNOWN_STATUS = "DESCONOCIDO"
INVALID_FORMAT = "Formato de respuesta inválido del servidor"


def server_error_message(status_code: int) -> str:
    return f"Error del servidor ({status_code})"


def describe_error(
    exc: Exception,
    fallback: str,
    *,
    forbidden: Optional[str] = None,
    not_found: Optional[str] = None,
) -> str:
    """Turn an exception raised below a store into the message shown to the user.

    401 → session expired, 403 → not permitted, 404 → not found,
    no response → connectivity, anything else → server payload message or fallback.
    """
    if isinstance(exc, UnauthorizedError):
        return SESSION_EXPIRED
    if isinstance(exc, MissingTokenError):
        return MISSING_TOKEN
    if isinstance(exc, ForbiddenError):
        return forbidden or FORBIDDEN
    if isinstance(exc, NotFoundError):
        return not_found or NOT_FOUND
    if isinstance(exc, NetworkError):
        return NETWORK
    if isinstance(exc, ApiError):
        return payload_message(exc) or fallback
    if isinstance(exc, AppException):
        return exc.message or fallback
    return fallback


def payload_message(exc: Exception) -> Optional[str]:
    """The server's own `message`/`error` text, when the backend sent one."""
    if isinstance(exc, ApiError) and exc.status_code is not None and isinstance(exc.detail, str):
        return exc.detail or None
    return None
