"""Structured logging configuration using structlog.

Provides JSON-formatted logs with consistent context including:
- archive_path: The EPUB archive being inspected
- operation: The public operation in flight (manifest, cover, entry_stream)
- timestamp: ISO8601 formatted timestamp

Usage:
    from epubinspect.logging import get_logger, configure_logging

    # Configure once at startup
    configure_logging()

    # Get a logger for a module
    logger = get_logger(__name__)
    logger.info("something_happened", extra_field="value")
"""

import logging
import sys
from contextvars import ContextVar

import structlog

# Context variables for extraction-scoped logging
archive_path_var: ContextVar[str | None] = ContextVar("archive_path", default=None)
operation_var: ContextVar[str | None] = ContextVar("operation", default=None)


def add_extraction_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Add extraction context to all log entries.

    Injects all non-None ContextVar values into the log event dict.
    """
    archive_path = archive_path_var.get()
    operation = operation_var.get()

    if archive_path:
        event_dict["archive_path"] = archive_path
    if operation:
        event_dict["operation"] = operation

    return event_dict


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Configure structlog for the inspector.

    Args:
        json_format: If True, output JSON logs. If False, output console-friendly logs.
        level: Root logger level name.
    """
    # Shared processors for both stdlib and structlog loggers
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_extraction_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def configure_logging_from_settings() -> None:
    """Configure logging using EPUB_LOG_JSON / EPUB_LOG_LEVEL."""
    from epubinspect.config import get_settings

    settings = get_settings()
    configure_logging(json_format=settings.json_logs, level=settings.log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def set_extraction_context(archive_path: str | None, operation: str | None = None) -> None:
    """Set extraction context for the current call.

    Args:
        archive_path: The archive being inspected.
        operation: The public operation name (optional).
    """
    archive_path_var.set(archive_path)
    if operation is not None:
        operation_var.set(operation)


def clear_extraction_context() -> None:
    """Clear all extraction-scoped context at the end of a call."""
    archive_path_var.set(None)
    operation_var.set(None)


def get_archive_path() -> str | None:
    """Get the current archive path from context."""
    return archive_path_var.get()
