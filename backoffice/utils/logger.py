"""
Logging configuration
"""
import logging
import sys
from backoffice.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    return logger


def configure_logging() -> logging.Logger:
    """
    Attach the stdout handler to the package logger; every module logger
    (logging.getLogger(__name__)) under backoffice propagates to it.
    """
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return get_logger("backoffice")
