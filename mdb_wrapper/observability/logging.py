"""
Logging utilities for MDB_WRAPPER.

Loggers carry bound context (database, collection) that is attached to
every record they emit.
"""

import logging
from typing import Any


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds its bound context to log records.

    Per-call ``extra`` values take precedence over the bound context.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = dict(self.extra or {})
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = context
        return msg, kwargs


def get_logger(name: str, **context: Any) -> ContextualLoggerAdapter:
    """
    Get a logger bound to ``context``.

    Args:
        name: Logger name (typically __name__)
        **context: Fields attached to every record (e.g. database="app")
    """
    return ContextualLoggerAdapter(logging.getLogger(name), context)


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    level: int = logging.DEBUG,
    success: bool = True,
    **context: Any,
) -> None:
    """
    Log a repository operation with structured context.

    Args:
        logger: Logger instance
        operation: Operation name
        level: Log level
        success: Whether operation succeeded
        **context: Additional context (entity_type, entity_id, count, ...)
    """
    if not logger.isEnabledFor(level):
        return

    message = f"Operation: {operation}"
    if not success:
        message = f"Operation failed: {operation}"
    details = ", ".join(f"{k}={v}" for k, v in context.items())
    if details:
        message += f" ({details})"

    logger.log(level, message, extra={"operation": operation, "success": success, **context})
