"""
Request monitoring and logging setup for CampusDesk.

Every request gets an id (taken from X-Request-ID or generated), which is
echoed back in the response, attached to every log record emitted while
the request is handled, and used to correlate slow or failed requests.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from campusdesk.core.clock import utcnow
from campusdesk.core.config import settings
from campusdesk.services.metrics_service import metrics_collector

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "request_id"}


def get_request_id() -> Optional[str]:
    """Id of the request being handled, if any."""
    return request_id_ctx.get()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """
    Tags requests with an id, times them and records request metrics.

    Requests slower than SLOW_REQUEST_THRESHOLD_MS are logged at WARNING.
    API requests are logged at INFO; other paths only in debug mode.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_ctx.set(request_id)
        started = time.perf_counter()

        context: Dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }

        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    f"Unhandled error on {context['method']} {context['path']}",
                    extra={**context, "duration_ms": _elapsed_ms(started), "event": "request_error"}
                )
                raise

            duration_ms = _elapsed_ms(started)
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers[RESPONSE_TIME_HEADER] = f"{duration_ms:.2f}ms"

            self._log_completed(context, response.status_code, duration_ms)

            if settings.ENABLE_PROMETHEUS_METRICS:
                metrics_collector.record_request(
                    method=context["method"],
                    endpoint=context["path"],
                    status_code=response.status_code,
                    duration_seconds=duration_ms / 1000
                )

            return response
        finally:
            request_id_ctx.reset(token)

    @staticmethod
    def _log_completed(context: Dict[str, Any], status_code: int, duration_ms: float):
        extra = {**context, "status_code": status_code, "duration_ms": duration_ms}
        summary = f"{context['method']} {context['path']} -> {status_code} in {duration_ms:.2f}ms"

        if duration_ms > settings.SLOW_REQUEST_THRESHOLD_MS:
            logger.warning(f"Slow request: {summary}", extra={**extra, "event": "slow_request"})
        elif settings.DEBUG or context["path"].startswith("/api/"):
            logger.info(summary, extra={**extra, "event": "request_complete"})


class RequestIdFilter(logging.Filter):
    """Stamp each record with the current request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


class StructuredJsonFormatter(logging.Formatter):
    """One JSON object per line, including any ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        payload.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS
        )

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_structured_logging(log_level: str = "INFO", json_format: bool = True):
    """
    Install a single stdout handler on the root logger.

    Args:
        log_level: Root level name (DEBUG, INFO, ...)
        json_format: JSON lines when True, a readable text format otherwise
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        StructuredJsonFormatter() if json_format
        else logging.Formatter("%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s")
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Third-party loggers that are noisy at INFO
    for name in ("uvicorn.access", "apscheduler"):
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )

    logger.info("Logging configured", extra={"json_format": json_format})
