# disruption_engine/logging.py
"""
Structured logging for the disruption engine.

Every record is emitted as one JSON object carrying timestamp, level, logger
and event name, plus whatever keyword fields the call site supplied:

    from disruption_engine.logging import get_logger
    logger = get_logger(__name__)
    logger.info("delay_applied", flight_id=12, delay_minutes=45, depth=0)

Loggers can carry bound context that is merged into every record, which is
how a cascade tags all of its lines with the root flight:

    cascade_log = logger.bind(root_flight_id=12)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class StructuredLogFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(getattr(record, "fields", {}))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.ERROR:
            payload["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(payload, default=str)


class StructuredLogger:
    """
    Keyword-field logger on top of the stdlib logger.

    Example:
        logger = get_logger(__name__)
        logger.warning("cascade_depth_limit_reached", flight_id=7, depth=21)
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **fields) -> "StructuredLogger":
        """Return a logger that adds `fields` to every record."""
        merged = dict(self._context)
        merged.update(fields)
        return StructuredLogger(self._logger.name, merged)

    def _emit(self, level: int, event: str, exc_info: bool = False, **fields):
        if not self._logger.isEnabledFor(level):
            return
        data = dict(self._context)
        data.update(fields)
        self._logger.log(level, event, exc_info=exc_info, extra={"fields": data})

    def debug(self, event: str, **fields):
        self._emit(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields):
        self._emit(logging.INFO, event, **fields)

    def warning(self, event: str, **fields):
        self._emit(logging.WARNING, event, **fields)

    def error(self, event: str, exc_info: bool = False, **fields):
        self._emit(logging.ERROR, event, exc_info=exc_info, **fields)

    def exception(self, event: str, **fields):
        """Log at ERROR with the active traceback attached."""
        self._emit(logging.ERROR, event, exc_info=True, **fields)


_configured = False


def configure_logging(
    level: Optional[str] = None,
    json_output: bool = True,
    log_file: Optional[str] = None,
):
    """
    Configure root logging once per process.

    Args:
        level: Log level name; defaults to LOG_LEVEL from settings
        json_output: JSON lines (True) or a plain human format (False)
        log_file: Optional file that also receives JSON lines
    """
    global _configured
    if _configured:
        return
    _configured = True

    if level is None:
        from .settings import settings
        level = settings.log_level

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    if json_output:
        console.setFormatter(StructuredLogFormatter())
    else:
        console.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredLogFormatter())
        root.addHandler(file_handler)

    # Third-party noise
    for noisy in ("uvicorn", "sqlalchemy", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger, configuring logging on first use."""
    if not _configured:
        configure_logging()
    return StructuredLogger(name)


def get_api_logger() -> StructuredLogger:
    """Logger shared by the HTTP routes."""
    return get_logger("disruption_engine.api")
