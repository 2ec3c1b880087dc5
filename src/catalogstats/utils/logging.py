"""
structlog setup for the pipeline.

Events go to stderr: stdout is reserved for rendered reports, which
may be JSON or CSV piped into other tools.
"""

import logging
import sys
from typing import Any, TextIO

import structlog


def build_processors(
    json_output: bool = False,
    colors: bool = False,
) -> list[structlog.types.Processor]:
    """
    Processor chain for one event: context, level, timestamp, renderer.

    Args:
        json_output: Render events as JSON lines instead of console text.
        colors: Colorize console output (ignored for JSON).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog (and stdlib logging) for a CLI run.

    Args:
        level: Minimum level name, e.g. 'INFO' or 'DEBUG'.
        json_output: One JSON object per event, for log shippers.
        stream: Destination, stderr by default.
    """
    stream = stream or sys.stderr
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)

    structlog.configure(
        processors=build_processors(json_output, colors=stream.isatty()),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module logger, e.g. ``log = get_logger(__name__)``."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind key-value pairs to every event logged inside the block.

    Example:
        with log_context(source="styles.csv"):
            log.info("Load complete", loaded=9)  # carries source=styles.csv
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
