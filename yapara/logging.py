"""Logging setup for yapara using loguru.

The library is silent unless `setup_logging` is called (the CLI does so with
`--verbose`).
"""

from __future__ import annotations

import sys

from loguru import logger

# Default format for console output
DEFAULT_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)

# JSON format for structured logging
JSON_FORMAT = "{message}"


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure logging and enable yapara's log output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, output logs as JSON for machine parsing.
        log_file: Optional file path to write logs to.
    """
    logger.remove()

    if json_output:
        logger.add(
            sys.stderr,
            format=JSON_FORMAT,
            serialize=True,
            level=level,
        )
    else:
        logger.add(
            sys.stderr,
            format=DEFAULT_FORMAT,
            level=level,
            colorize=True,
        )

    if log_file:
        logger.add(
            log_file,
            format=DEFAULT_FORMAT,
            level=level,
        )

    logger.enable("yapara")


def disable_logging() -> None:
    logger.disable("yapara")
