# app/core/logging.py
# Logging setup for the API process.
# Every module logs through a named child of the "tutorhub" logger:
#   logger = logging.getLogger("tutorhub.bookings")

import logging
import sys
from typing import Optional

LOGGER_NAME = "tutorhub"

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s:%(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root "tutorhub" logger with a single console handler.
    Safe to call more than once -- existing handlers are replaced.
    """
    from app.core.config import settings

    log_level = (level or settings.log_level or "INFO").upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger, e.g. get_logger("matching") -> tutorhub.matching"""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
