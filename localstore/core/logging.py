"""Structured logging configuration and the engine's diagnostic log modes."""

import sys
import structlog
import logging
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union


def configure_logging(settings: Any) -> None:
    """Configure structured logging based on settings.

    Intended for host processes that want the library to own logging setup;
    embedding applications that already configure structlog can skip it.
    """
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
        processors.insert(0, structlog.stdlib.add_logger_name)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.insert(0, structlog.processors.TimeStamper(fmt="%H:%M:%S"))
        processors.append(structlog.dev.ConsoleRenderer(
            colors=False,
            pad_event=35,
            exception_formatter=structlog.dev.plain_traceback
        ))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_storage_operation(logger: structlog.BoundLogger, operation: str,
                          path: str, key: Optional[str] = None, **kwargs) -> None:
    """Log storage operations."""
    log_data = {
        "operation": operation,
        "path": path,
        **kwargs
    }

    if key is not None:
        log_data["storage_key"] = key

    logger.info("Storage operation", **log_data)


class LogMode(str, Enum):
    """How engine diagnostics are emitted."""
    DISABLED = "disabled"    # Silent
    ENABLED = "enabled"      # Through the structlog logger
    CUSTOM = "custom"        # Through a caller-supplied sink


LogSink = Callable[..., Any]


def resolve_log_sink(option: Union[bool, LogSink, None]) -> Tuple[LogMode, Optional[LogSink]]:
    """Resolve the ``logging`` setting into a mode and optional sink.

    Args:
        option: False/None, True, or a callable taking ``(message, **context)``

    Returns:
        Tuple of (mode, sink); sink is only set for LogMode.CUSTOM
    """
    if callable(option):
        return LogMode.CUSTOM, option
    if option:
        return LogMode.ENABLED, None
    return LogMode.DISABLED, None
