"""
Logging configuration.

One JSON object per line in production, a compact text line elsewhere.
Both formats carry the request id of the HTTP request being served.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional
from uuid import uuid4

SERVICE_NAME = "coffre"

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# LogRecord attributes; anything else arrived through extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "request_id"}

_QUIET_LOGGERS = ("asyncio", "aiohttp.access", "web3", "sqlalchemy.engine", "httpx")


class RequestIDFilter(logging.Filter):
    """Stamp every record with the current request id ("-" outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Fields passed via ``extra=`` (simulation_id, wallet_address, ...) are
    merged into the top-level object.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            entry["request_id"] = request_id

        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        json_logs: JSON lines (True) or human-readable text (False)
    """
    numeric_level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    if json_logs:
        handler.setFormatter(JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use as ``logger = get_logger(__name__)``."""
    return logging.getLogger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request id to the current context.

    Args:
        request_id: Incoming id (a UUID4 is generated when None or empty)

    Returns:
        Request id that was bound
    """
    request_id = request_id or str(uuid4())
    request_id_ctx.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()
