"""
Observability components.

Provides loggers with bound context and structured operation logging.
"""

from .logging import ContextualLoggerAdapter, get_logger, log_operation

__all__ = [
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
]
