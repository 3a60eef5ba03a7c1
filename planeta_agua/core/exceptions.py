# planeta_agua/core/exceptions.py

from enum import Enum
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Error categories exposed by the API."""

    CLIENT_INPUT = "CLIENT_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PERSISTENCE = "PERSISTENCE"
    UPSTREAM = "UPSTREAM"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


STATUS_CODES = {
    ErrorCode.CLIENT_INPUT: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.PERSISTENCE: 500,
    ErrorCode.UPSTREAM: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}


class PlanetaAguaError(Exception):
    """Base exception for every error the API turns into a response."""

    code = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        response = {"error": self.message}
        if self.details is not None:
            response["details"] = self.details
        return response


class ClientInputError(PlanetaAguaError):
    code = ErrorCode.CLIENT_INPUT


class AuthorizationError(PlanetaAguaError):
    code = ErrorCode.UNAUTHORIZED


class NotFoundError(PlanetaAguaError):
    code = ErrorCode.NOT_FOUND


class ConflictError(PlanetaAguaError):
    code = ErrorCode.CONFLICT


class PersistenceError(PlanetaAguaError):
    code = ErrorCode.PERSISTENCE


class GatewayError(PlanetaAguaError):
    """Raised when the payment gateway rejects a call or cannot be reached."""

    code = ErrorCode.UPSTREAM

    def __init__(self, message: str, details: Optional[str] = None, status: Optional[int] = None):
        self.status = status
        super().__init__(message, details)
