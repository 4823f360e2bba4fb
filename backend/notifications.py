# backend/notifications.py
import os
import logging
from typing import Optional

from .utils.config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Loggers whose records also go to logs/notifications.log
NOTIFICATION_LOGGERS = ["backend.services", "backend.agents", "backend.scheduler"]


def setup_logging(level: int = logging.INFO, logs_dir: Optional[str] = None) -> str:
    """
    Configure console logging and append notification activity to
    <logs_dir>/notifications.log. Returns the log file path.
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)

    logs_dir = logs_dir or config.LOGS_PATH
    os.makedirs(logs_dir, exist_ok=True)
    log_file = os.path.abspath(os.path.join(logs_dir, "notifications.log"))

    for name in NOTIFICATION_LOGGERS:
        logger = logging.getLogger(name)
        already_attached = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_file
            for h in logger.handlers
        )
        if not already_attached:
            handler = logging.FileHandler(log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)

    return log_file
