"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this module
only decides the root level and format once at startup.
"""

import logging

from trip_ledger.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging() -> None:
    settings = get_settings()
    level = logging.DEBUG if settings.DEBUG else getattr(
        logging, settings.LOG_LEVEL, logging.INFO
    )
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
