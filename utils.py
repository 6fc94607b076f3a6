"""
General utility functions for the CLI application: the shared rich console
and logging setup.
"""

import logging
import os
import sys

from rich.console import Console
import structlog

console: Console = Console()


def setup_logging() -> None:
    """
    Configure structlog and stdlib logging.

    Reads from environment variables:
        VERSYNC_LOG_LEVEL  - log level (default: WARNING)
        VERSYNC_LOG_FORMAT - console | json (default: console)

    Logs go to stderr so that machine-readable output on stdout (e.g.
    `discover --format json`) stays clean.
    """
    log_level = os.environ.get("VERSYNC_LOG_LEVEL", "WARNING").upper()
    log_format = os.environ.get("VERSYNC_LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
