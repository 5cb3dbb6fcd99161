"""Application-wide exception classes."""

from __future__ import annotations

from typing import Any, Dict, Optional


class ApplicationError(Exception):
    """Base exception for all application errors.

    ``public_message`` is the only text ever shown to an unauthenticated
    caller; the exception message itself is for logs.
    """
    status_code = 500
    public_message = "Ocurrió un error inesperado. Inténtalo de nuevo."

    def __init__(self, message: str = "", *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message or self.public_message)
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "error": self.public_message}
        payload.update(self.details)
        return payload


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class TokenError(ApplicationError):
    """Base exception for token authentication failures.

    Every subclass renders the same public message so callers cannot tell
    a malformed id from a bad signature.
    """
    status_code = 403
    public_message = "Token inválido"


class InvalidFormatError(TokenError):
    """Raised when a token id does not match ``prefix-YYYY-MM-DD-NNN``."""
    pass


class SignatureMismatchError(TokenError):
    """Raised when the provided signature does not verify."""
    pass


class TokenNotFoundError(TokenError):
    """Raised when a signed id has no row in the day's token file."""
    pass


class ServiceError(ApplicationError):
    """Base exception for service-level errors."""
    pass


class NoPrizesAvailableError(ServiceError):
    """Raised when every candidate prize has zero weight or stock."""
    status_code = 409
    public_message = "No hay premios disponibles"


class AlreadyPlayedError(ServiceError):
    """Raised when a token id already produced a final result."""
    status_code = 409
    public_message = "Ya has participado con esta pulsera"


class EventNotStartedError(ServiceError):
    """Raised when play is attempted before the event gate opens."""
    status_code = 403
    public_message = "El juego aún no está disponible"


class ValidationError(ApplicationError):
    """Raised when data validation fails."""
    status_code = 400
    public_message = "Valores inválidos"


class RateLimitError(ApplicationError):
    """Raised when rate limit is exceeded."""
    status_code = 429
    public_message = "Demasiadas solicitudes. Intenta más tarde."


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""
    status_code = 401
    public_message = "No autorizado"
