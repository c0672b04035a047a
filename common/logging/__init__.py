"""
Logging module - one place to configure process-wide logging.
"""

from common.logging.setup import configure_logging, LOG_FORMAT

__all__ = ["configure_logging", "LOG_FORMAT"]
