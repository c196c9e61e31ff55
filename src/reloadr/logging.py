"""Structured logging configuration using structlog."""

import logging
import sys

import structlog
from structlog.typing import Processor

# Loggers of the libraries under the dev server and the level they log at.
LIBRARY_LEVELS: dict[str, int] = {
    "watchdog": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.WARNING,
}


def build_processors(json_logs: bool) -> list[Processor]:
    """Return the processor chain ending in the chosen renderer.

    Args:
        json_logs: Render JSON lines when True, colored console output otherwise.

    Returns:
        Processors for ``structlog.configure``.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.set_exc_info,
    ]
    if json_logs:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(debug: bool = False, json_logs: bool = True) -> None:
    """Configure structlog and route library logs through stdout.

    Args:
        debug: Enable debug-level logging when True, which includes every
            reload broadcast.
        json_logs: Emit JSON lines; console output is easier to read when
            running the dev server by hand.
    """
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=build_processors(json_logs),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name, library_level in LIBRARY_LEVELS.items():
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.propagate = True
        library_logger.setLevel(max(level, library_level))
