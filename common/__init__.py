"""
Infrastructure shared by the SchoolFlow API and its CRON jobs.

- config: ``BaseAppSettings`` read from the environment
- database: the Motor client wrapper
- logging: process-wide log format and levels
- utils: response envelopes, HTTP exceptions, bcrypt password helpers
"""

from common.config import BaseAppSettings
from common.database import MongoDB
from common.logging import configure_logging
from common.utils import (
    APIException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    error_response,
    success_response,
    validate_password,
)

__all__ = [
    "BaseAppSettings",
    "MongoDB",
    "configure_logging",
    "APIException",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "error_response",
    "success_response",
    "validate_password",
]
