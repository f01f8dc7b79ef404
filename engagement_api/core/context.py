"""Request-scoped context: trace id and the store deadline."""

import time
from contextvars import ContextVar
from typing import Optional

_trace_id: ContextVar[str] = ContextVar("trace_id", default="-")
# абсолютный момент (time.monotonic), после которого в Mongo не ходим
_deadline: ContextVar[Optional[float]] = ContextVar("deadline", default=None)


def get_trace_id() -> str:
    return _trace_id.get()


def set_trace_id(value: str) -> None:
    _trace_id.set(value)


def start_deadline(timeout_s: float) -> None:
    """Start the request budget shared by every store call."""
    _deadline.set(time.monotonic() + timeout_s)


def clear_deadline() -> None:
    _deadline.set(None)


def remaining(default_s: float) -> float:
    """Seconds left until the request deadline.

    Outside of a request (scripts, direct service calls) the full
    ``default_s`` budget applies to each call.
    """
    deadline = _deadline.get()
    if deadline is None:
        return default_s
    return deadline - time.monotonic()
