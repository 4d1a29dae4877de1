"""
Logging setup - one console handler for the "sirius" logger hierarchy.

Every module logs through logging.getLogger("sirius.<area>") so a single
handler here formats output for the whole application.
"""

import logging
import sys

from sirius.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = None) -> logging.Logger:
    """
    Configure the root "sirius" logger.

    Safe to call more than once: the handler is only added the first time.
    """
    logger = logging.getLogger("sirius")
    resolved = (level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)).upper()
    logger.setLevel(resolved)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
