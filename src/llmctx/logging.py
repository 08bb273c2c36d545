from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "llmctx"
DEFAULT_LOG_LEVEL = "WARNING"


def setup_logging(
    filename: str | Path | None = None,
    level: str = DEFAULT_LOG_LEVEL,
) -> structlog.BoundLogger:
    """Set up structured logging for the llmctx package.

    Only the `llmctx` stdlib logger is touched. Safe to call more than once:
    the latest call wins, so the CLI can reconfigure after its options are parsed.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Name of the minimum level to emit (e.g. "INFO").

    Returns:
        A structlog logger instance configured for the llmctx package.
    """
    numeric_level = logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)
    handler: logging.Handler
    if filename:
        handler = logging.FileHandler(str(filename), encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    std_logger = logging.getLogger(LOGGER_NAME)
    for old in list(std_logger.handlers):
        std_logger.removeHandler(old)
        old.close()
    std_logger.addHandler(handler)
    std_logger.setLevel(numeric_level)
    std_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger(LOGGER_NAME)


logger = setup_logging()
