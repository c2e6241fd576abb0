"""
Logging setup for ferry.

Everything goes through loguru. Uvicorn, FastAPI and python-multipart (which
parses the upload bodies) log through the standard library, so their records
are forwarded to loguru as well.
"""

import logging
import sys

from loguru import logger

# Standard library loggers used by the server and the multipart parser
STDLIB_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "python_multipart")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Forwards standard library records to loguru.
    See: https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Report the original caller, not the logging module
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO"):
    """
    Send ferry, server and multipart logs to stdout through loguru.

    Args:
        level: Minimum level for the stdout sink (LOG_LEVEL setting).
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level, colorize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in STDLIB_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False

    logger.info(f"Logging initialized with Loguru at level {level}.")
