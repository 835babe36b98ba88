"""Console logging setup for the chart series backend."""

import logging

from .config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL, name: str = "chart_backend") -> logging.Logger:
    """Attach a single console handler to the package logger and return it.

    Calling this more than once replaces the handler instead of stacking
    duplicates.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(console_handler)
    return logger
