"""Logging setup for the pagemd CLI"""

import logging
import sys


LOGGER_NAME = "pagemd"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING", verbose: bool = False) -> logging.Logger:
    """Point a single stderr handler at the package logger; safe to call repeatedly."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING))
    for handler in logger.handlers:
        if getattr(handler, "_pagemd", False):
            handler.setStream(sys.stderr)
            return logger
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._pagemd = True
    logger.addHandler(handler)
    return logger
