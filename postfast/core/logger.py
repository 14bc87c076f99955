# postfast/core/logger.py
"""
Logging setup for the API process and the scheduled publisher.
"""

import logging
import sys

FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the ``postfast`` logger tree."""
    logger = logging.getLogger("postfast")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_postfast", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATE_FORMAT))
        handler._postfast = True
        logger.addHandler(handler)

    # APScheduler logs every job run at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    return logger


__all__ = ["setup_logging"]
