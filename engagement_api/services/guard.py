"""Actor and ownership checks shared by the write paths."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Any, Iterator, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError, PyMongoError

from engagement_api.core.errors import (AuthenticationError,
                                        AuthorizationError, ConflictError,
                                        InternalError, ValidationError)

log = logging.getLogger(__name__)


def parse_object_id(value: Any, what: str = "id") -> ObjectId:
    """Well-formed ObjectId or ValidationError, before any store access."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {what}")
    try:
        return ObjectId(value)
    except InvalidId:
        raise ValidationError(f"Invalid {what}") from None


def require_actor(principal: Optional[str]) -> ObjectId:
    """Authenticated user id; AuthenticationError when absent or garbled."""
    if not principal:
        raise AuthenticationError("Unauthorized request")
    try:
        return ObjectId(principal)
    except (InvalidId, TypeError):
        raise AuthenticationError("Invalid user id") from None


def require_ownership(entity: dict, actor: ObjectId) -> None:
    if entity.get('owner') != actor:
        raise AuthorizationError()


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Turn driver failures into domain errors.

    A DuplicateKeyError that reaches here is a unique index doing its job;
    anything else from the driver is logged and reported as InternalError.
    """
    try:
        yield
    except DuplicateKeyError as error:
        raise ConflictError() from error
    except PyMongoError as error:
        log.error(
            "mongo_%s_error", operation, extra={"err": str(error)})
        raise InternalError() from error
