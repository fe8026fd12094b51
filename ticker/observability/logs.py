"""
Logging setup for the ticker service.
Console logging always; daily rotated file logging when LOG_FILE is set.
"""

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

from ticker.config import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(level=level or settings.LOG_LEVEL, format=LOG_FORMAT)
    if settings.LOG_FILE:
        setup_log_rotation(settings.LOG_FILE)

def setup_log_rotation(log_file: str) -> None:
    """Setup daily log rotation, keeping 7 days."""
    try:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        handler = TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root_logger = logging.getLogger()
        root_logger.addHandler(handler)

        logger.info(f"Log rotation configured for {log_file} (daily, keep 7 days)")

    except Exception as e:
        logger.error(f"Failed to setup log rotation: {e}")
