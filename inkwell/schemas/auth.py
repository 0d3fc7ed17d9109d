"""
Pydantic models for Auth system request/response validation.

Defines schemas for registration, login, password change and sessions.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, EmailStr


class RegisterRequest(BaseModel):
    """Request body for user registration."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(BaseModel):
    """Request body for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    """Request body for changing the password of the signed-in user."""
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1, max_length=128)
    keepCurrentSession: bool = Field(
        default=True,
        description="Leave the session making the change signed in"
    )


class DeviceSchema(BaseModel):
    """Device information for a session."""
    deviceType: str = Field(..., description="mobile | tablet | desktop")
    os: str = Field(..., description="iOS | Android | Windows | macOS | Linux | Chrome OS")
    browser: str = Field(..., description="Chrome | Safari | Firefox | Edge | etc.")
    displayName: str = Field(..., description="Human-readable device description")


class SessionResponse(BaseModel):
    """Session information in API responses."""
    id: str = Field(..., description="Session ID")
    deviceLabel: str = Field(..., description="Normalized device key, e.g. macos-safari")
    device: Optional[DeviceSchema] = None
    issuedAt: datetime
    expiresAt: datetime
    isCurrent: bool = Field(default=False)


class SessionListResponse(BaseModel):
    """Response for listing sessions."""
    sessions: List[SessionResponse]
