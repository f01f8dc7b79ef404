import logging
import sys
from logging.handlers import QueueHandler, QueueListener
from queue import Queue

from pythonjsonlogger.json import JsonFormatter

from engagement_api.core.config import settings
from engagement_api.core.context import get_trace_id

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "%(pathname)s %(lineno)d %(trace_id)s %(service)s %(env)s"
)


class TraceContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # поля проставляем до того, как запись уйдёт в очередь
        record.trace_id = (getattr(record, "trace_id", None)
                           or get_trace_id() or "-")
        record.service = getattr(record, "service", None) or settings.app_name
        record.env = getattr(record, "env", None) or settings.env
        return True


_listener: QueueListener | None = None


def setup_json_logging(service: str = "engagement_service",
                       level: int = logging.INFO) -> None:
    """Route every logger through a queue into one JSON stdout handler."""
    global _listener
    if _listener is not None:
        return

    root = logging.getLogger()
    root.setLevel(level)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(JsonFormatter(LOG_FORMAT))

    q: Queue = Queue(-1)
    queue_handler = QueueHandler(q)
    # trace_id берём из contextvar в потоке запроса, не в потоке listener-а
    queue_handler.addFilter(TraceContextFilter())

    _listener = QueueListener(q, stream_handler, respect_handler_level=True)
    _listener.start()

    root.handlers = [queue_handler]

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True

    logging.getLogger(__name__).info(
        "logger_initialized",
        extra={"service": service})


def shutdown_logging() -> None:
    """Stop the queue listener, flushing pending records."""
    global _listener
    if _listener:
        _listener.stop()
        _listener = None
