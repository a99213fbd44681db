"""Structured key=value logging for Shepherd Engine."""

import logging
import sys
from typing import Any

# Context fields promoted ahead of free-form extras, in this order
_PROMOTED_FIELDS = ("request_id", "task", "state", "provider")


class StructuredFormatter(logging.Formatter):
    """Render records as `key=value` pairs on one line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, Any] = dict(getattr(record, "extra_data", None) or {})
        for field in _PROMOTED_FIELDS:
            if field in context:
                log_data[field] = context.pop(field)
        log_data.update({k: v for k, v in context.items() if v is not None})

        line = " ".join(f"{k}={v}" for k, v in log_data.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _level_for_env(env: str) -> int:
    if env == "dev":
        return logging.DEBUG
    if env == "test":
        return logging.WARNING
    return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger writing structured lines to stdout
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

        try:
            from shepherd_engine.core.config import get_settings

            logger.setLevel(_level_for_env(get_settings().ENGINE_ENV))
        except Exception:
            # Settings unavailable (e.g. malformed env), keep logging usable
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with structured context fields (task, state, provider, ...).

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields rendered after the message
    """
    logger.log(level, msg, extra={"extra_data": kwargs})
