"""Structured logging for the portal.

Records carry the request and correlation ids of the request being served
(set by ``CorrelationMiddleware``, or by ``LogContext`` outside HTTP).
Production writes one JSON object per line; development gets a readable
single-line console format.

    configure_logging(json_format=settings.env != "dev", level=settings.log_level)
    logging.getLogger(__name__).info("Cache miss: portal:StudentData")
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Libraries whose INFO output drowns the application's own
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "redis": logging.WARNING,
}


def _correlation() -> dict[str, str]:
    context = {"request_id": request_id_var.get(), "correlation_id": correlation_id_var.get()}
    return {name: value for name, value in context.items() if value}


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Example:
        {"timestamp": "2026-01-10T12:34:56.789+00:00", "level": "WARNING",
         "logger": "portal.cache.redis", "message": "Returning uncached value ...",
         "location": "redis.get_or_set:171", "request_id": "abc-123"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            **_correlation(),
        }

        entry.update(
            (name, value)
            for name, value in vars(record).items()
            if name not in _RECORD_ATTRS and not name.startswith("_")
        )

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return orjson.dumps(entry, default=str).decode()


class ConsoleFormatter(logging.Formatter):
    """Readable development format.

    Example:
        12:34:56 WARNING  portal.cache.redis  Returning uncached value ... [req=abc-123]
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        line = (
            f"{datetime.fromtimestamp(record.created):%H:%M:%S} {level} "
            f"{record.name}  {record.getMessage()}"
        )

        request_id = request_id_var.get()
        if request_id:
            line += f" [req={request_id[:8]}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        json_format: JSON lines instead of the console format
        level: Root level name, case-insensitive
        use_colors: Colour the console format when stderr is a terminal
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter(use_colors))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


class LogContext:
    """Temporarily set the correlation ids outside a request.

    Usage:
        with LogContext(request_id="cli-reset"):
            logger.info("Flushing cache")
    """

    def __init__(self, request_id: str | None = None, correlation_id: str | None = None):
        self._values = [
            (var, value)
            for var, value in ((request_id_var, request_id), (correlation_id_var, correlation_id))
            if value is not None
        ]
        self._tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []

    def __enter__(self) -> LogContext:
        self._tokens = [(var, var.set(value)) for var, value in self._values]
        return self

    def __exit__(self, *args: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []
