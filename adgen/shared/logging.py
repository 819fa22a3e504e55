"""
Structured logging setup for all modules.

Provides JSON-structured logging with automatic session_id injection.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from adgen.shared.config import get_settings

MB = 1024 * 1024

# Current generation session
session_id_context: ContextVar[Optional[str]] = ContextVar("session_id", default=None)

# Standard LogRecord attributes; anything else on a record came from extra=
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "getMessage", "taskName"
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        session_id = session_id_context.get()

        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }

        if session_id:
            log_data["session_id"] = session_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                if isinstance(value, (str, int, float, bool, type(None))):
                    log_data[key] = value
                else:
                    log_data[key] = str(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _build_handlers(settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_dir / "app.log", maxBytes=100 * MB, backupCount=5))
    for handler in handlers:
        handler.setFormatter(JSONFormatter())
    return handlers


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, e.g. ``get_logger("image_variations")``.

    Handlers are attached once per name: stdout always, plus ``app.log``
    under LOG_DIR when it is set.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        settings = get_settings()
        logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
        for handler in _build_handlers(settings):
            logger.addHandler(handler)
    return logger


def set_session_id(session_id: Optional[str]) -> None:
    """
    Set session_id in context for automatic injection into logs.

    Args:
        session_id: Generation session ID to set in context
    """
    session_id_context.set(session_id)


def get_session_id() -> Optional[str]:
    """Return the current session_id or None."""
    return session_id_context.get()
