"""Root logging configuration, applied once by the app factory."""

import logging

from erp_hr.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Set up the root logger from ``LOG_LEVEL`` (or an explicit level)."""
    name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    # SQL echo is controlled by the engine; keep the pool logger quiet
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
