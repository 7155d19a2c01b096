"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON output format and standard processors
    for timestamps, log levels, and context binding.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a lazily configured logger.

    Configuration is resolved on each call, so loggers can be created at
    import time before ``configure_logging`` runs.

    Args:
        name: Module name recorded as ``logger`` on every event.

    Returns:
        Bound logger instance.
    """
    if name is None:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger()
    else:
        # ``structlog.get_logger(logger=...)`` clashes with ``wrap_logger``'s
        # positional ``logger`` parameter, so build the same lazy proxy directly.
        logger = structlog._config.BoundLoggerLazyProxy(
            None, logger_factory_args=(), initial_values={"logger": name}
        )
    return logger


def bind_fetcher_context(fetcher: str) -> None:
    """Bind the fetcher instance name to all subsequent log messages.

    Args:
        fetcher: Logical fetcher name.
    """
    structlog.contextvars.bind_contextvars(fetcher=fetcher)


def clear_fetcher_context() -> None:
    """Clear fetcher context from log messages."""
    structlog.contextvars.unbind_contextvars("fetcher")
