"""
Utilities module - Common helpers for API responses, exceptions, and validation.
"""

from common.utils.responses import success_response, error_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ConflictException,
    ValidationException,
    InternalServerException,
)
from common.utils.password import PasswordPolicy, validate_password, make_password_policy

__all__ = [
    "success_response",
    "error_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ConflictException",
    "ValidationException",
    "InternalServerException",
    "PasswordPolicy",
    "validate_password",
    "make_password_policy",
]
