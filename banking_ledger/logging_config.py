"""
Structured Logging Configuration Module

Provides JSON-formatted structured logging for ledger operations. Postings
and rejections go through log_action so each line carries the action, the
account resource and the resulting figures.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

from .config import get_config


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module if hasattr(record, 'module') else record.name,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, 'correlation_id', None),
            "user_id": getattr(record, 'user_id', None),
            "action": getattr(record, 'action', None),
            "resource": getattr(record, 'resource', None),
            "extra": getattr(record, 'extra', None)
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

FORMATTERS = {
    "json": JSONFormatter,
    "text": lambda: logging.Formatter(TEXT_FORMAT),
}


def setup_logging(level: Optional[str] = None, logger_name: str = "banking_ledger",
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stream handler to the ledger logger.

    Level and format not passed in are taken from the current LedgerConfig
    (BANKING_LEDGER_LOG_LEVEL / BANKING_LEDGER_LOG_FORMAT).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger
        log_format: "json" for one JSON object per line, "text" for plain lines

    Returns:
        Configured logger instance

    Raises:
        ValueError: If the level or format is unknown
    """
    settings = get_config()
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    if log_format not in FORMATTERS:
        raise ValueError(f"Unknown log format: {log_format}")
    levelno = logging.getLevelName(level)
    if not isinstance(levelno, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(logger_name)

    # Replace rather than stack handlers on repeated setup
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(FORMATTERS[log_format]())
    logger.addHandler(handler)
    logger.setLevel(levelno)
    logger.propagate = False

    return logger


def get_logger(name: str = "banking_ledger") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               user_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, correlation_id: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log an action with structured data.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        user_id: ID of the user performing the action
        action: Action being performed
        resource: Resource being acted upon
        correlation_id: Correlation ID for request tracing
        extra: Additional structured data
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    record = logger.makeRecord(
        logger.name, levelno, __name__, 0, message, (), None
    )

    # Add custom fields
    if user_id:
        record.user_id = user_id
    if action:
        record.action = action
    if resource:
        record.resource = resource
    if correlation_id:
        record.correlation_id = correlation_id
    if extra:
        record.extra = extra

    logger.handle(record)
