"""
Logging configuration for the policy engine
"""
import logging
import sys
from attendance_engine.core.config import settings


def setup_logging() -> None:
    """
    Configure Python logging based on settings

    Sets up:
    - Console handler with a timestamped format
    - Log level from settings.LOG_LEVEL
    - Quieter levels for uvicorn access logs and SQLAlchemy
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured: level=%s, env=%s, timezone=%s, geofence=%s",
        settings.LOG_LEVEL, settings.APP_ENV, settings.BUSINESS_TIMEZONE, settings.GEOFENCE_ENFORCEMENT,
    )

