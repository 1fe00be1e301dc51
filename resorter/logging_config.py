"""
Logging configuration for the resorter.

Sets up loguru with appropriate levels and formatting.
"""

import sys

from loguru import logger
from typing import Any

# Records bound with this extra key skip the console sink
FILE_ONLY = "file_only"


def _console_filter(record: Any) -> bool:
    return not record["extra"].get(FILE_ONLY, False)


def setup_logging(level: str = "WARNING", debug: bool = False, log_file: str | None = "resorter.log") -> None:
    """
    Configure loguru logging.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, enable debug logging and more verbose output
        log_file: Path of the persistent log file, or None to disable file logging
    """
    # Remove default handler
    logger.remove()

    log_level = "DEBUG" if debug else level

    # Console output shares the terminal with comparison prompts
    logger.add(
        sys.stderr,
        level=log_level,
        filter=_console_filter,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>",
    )

    if log_file is None:
        return

    logger.add(
        log_file,
        level="INFO",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
    )

    if debug:
        debug_file = log_file.removesuffix(".log") + "_debug.log"
        logger.add(
            debug_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="50 MB",
            retention="3 days",
            compression="zip",
        )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (defaults to calling module)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger
