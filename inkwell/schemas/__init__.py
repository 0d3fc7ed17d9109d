"""
Request and response schemas.
"""

from inkwell.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ChangePasswordRequest,
    DeviceSchema,
    SessionResponse,
    SessionListResponse,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "ChangePasswordRequest",
    "DeviceSchema",
    "SessionResponse",
    "SessionListResponse",
]
