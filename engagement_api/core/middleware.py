import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from engagement_api.core.config import settings
from engagement_api.core.context import (clear_deadline, set_trace_id,
                                         start_deadline)

alog = logging.getLogger("access")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Per-request trace id, store deadline and one access record."""

    async def dispatch(self, request: Request, call_next):
        set_trace_id(request.headers.get("X-Request-Id")
                     or str(uuid.uuid4()))
        start_deadline(settings.request_timeout_s)
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            clear_deadline()
            dur_ms = int((time.perf_counter() - start) * 1000)
            alog.info(
                "access",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "query": str(request.url.query)
                    if request.url.query else "",
                    "status": status,
                    "latency_ms": dur_ms,
                    "client_ip": request.client.host
                    if request.client else None,
                    "user_id": request.headers.get("X-User-Id"),
                },
            )
