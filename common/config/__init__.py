"""
Settings shared by the API and the CRON jobs.
"""

from common.config.base_settings import BaseAppSettings

__all__ = ["BaseAppSettings"]
