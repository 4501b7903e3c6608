"""
Structured JSON Logging for HostAlloc Engine

Library modules log through ``logging.getLogger(__name__)``; this module
attaches handlers to the ``hostalloc_engine`` package logger: a
human-readable console handler and, optionally, a rotating JSON file
handler with run correlation.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "hostalloc_engine"

_HANDLER_MARKER = "_hostalloc_handler"


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON logs"""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "run_id": self.run_id,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_info = (
                record.exc_info if isinstance(record.exc_info, tuple) else sys.exc_info()
            )
            if exc_info and isinstance(exc_info, tuple):
                log_data["exception"] = {
                    "type": exc_info[0].__name__ if exc_info[0] else None,
                    "message": str(exc_info[1]) if exc_info[1] else None,
                    "traceback": self.formatException(exc_info),
                }

        # Add any extra data attached to the record
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def generate_run_id() -> str:
    """Generate unique run ID with timestamp and UUID"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    unique_suffix = str(uuid.uuid4())[:8]
    return f"{timestamp}-{unique_suffix}"


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    run_id: Optional[str] = None,
) -> str:
    """
    Configure console (and optionally JSON file) logging for the engine.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of a rotating JSON log file; no file logging when None
        run_id: Correlation id written to every JSON record. Generated if not provided.

    Returns:
        The run id in use.
    """
    run_id = run_id or generate_run_id()
    log_level = getattr(logging, level.upper())

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_MARKER, False):
            handler.close()
            logger.removeHandler(handler)

    # Console handler for human-readable output; stdout is kept for plan output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    console_handler.setLevel(log_level)
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        # JSON file handler with rotation (10MB, keep 10 files)
        json_handler = RotatingFileHandler(
            path,
            maxBytes=10 * 1024 * 1024,
            backupCount=10,
        )
        json_handler.setFormatter(JSONFormatter(run_id))
        json_handler.setLevel(log_level)
        setattr(json_handler, _HANDLER_MARKER, True)
        logger.addHandler(json_handler)

    # Prevent propagation to root logger
    logger.propagate = False
    return run_id


def reset_logging() -> None:
    """Remove handlers installed by ``configure_logging``."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_MARKER, False):
            handler.close()
            logger.removeHandler(handler)
    logger.propagate = True
