"""Domain error taxonomy.

Every error carries the status class it maps to at the transport
boundary; services raise them at the point of detection and nothing
between the service and the exception handler rewrites them.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, List, Optional


class ApiError(Exception):
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or missing input."""

    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(ApiError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized request"


class AuthorizationError(ApiError):
    status_code = HTTPStatus.FORBIDDEN
    default_message = "Not allowed to modify this resource"


class NotFoundError(ApiError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "Not found"


class ConflictError(ApiError):
    """Uniqueness or invariant violation, incl. exhausted toggle retries."""

    status_code = HTTPStatus.CONFLICT
    default_message = "Conflict"


class RequestTimeoutError(ApiError):
    """A store call ran past the request deadline."""

    status_code = HTTPStatus.GATEWAY_TIMEOUT
    default_message = "Store did not answer in time"


class InternalError(ApiError):
    # сообщение всегда общее, текст ошибки Mongo наружу не отдаём
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
