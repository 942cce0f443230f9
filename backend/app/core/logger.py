# app/core/logger.py
"""
Application-wide logger.

Configures the root handler once; modules either import ``logger`` from here
or call ``logging.getLogger(__name__)``.
"""
import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging() -> logging.Logger:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())

    # uvicorn access logs duplicate the correlation middleware line
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return logging.getLogger("highlight_tax")


logger = setup_logging()
