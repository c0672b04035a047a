"""
Envelopes, HTTP exceptions and password hashing used across the API.
"""

from common.utils.responses import success_response, error_response, list_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
)
from common.utils.password import (
    hash_password,
    verify_password,
    validate_password,
    check_password,
)

__all__ = [
    "success_response",
    "error_response",
    "list_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "hash_password",
    "verify_password",
    "validate_password",
    "check_password",
]
