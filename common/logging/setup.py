"""
Process-wide logging configuration.

Called once by the API entry point and by CRON jobs. Modules only ever
create their own logger with ``logging.getLogger(__name__)``.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers kept at WARNING unless we are debugging
_NOISY_LOGGERS = ("pymongo", "httpx", "httpcore")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)

    if numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
