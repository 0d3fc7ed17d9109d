"""
Domain records for users and their device sessions.

These are storage-agnostic; repositories map them to and from documents.
"""

import enum
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_DEVICE = "unknown"


class UserRole(str, enum.Enum):
    """Account kind."""
    PERSONAL = "personal"
    SUB_SITE = "sub_site"


class SessionState(str, enum.Enum):
    """Lifecycle state of a device session. REVOKED and EXPIRED are terminal."""
    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"


class UserSettings(BaseModel):
    """News feed preferences stored alongside the user."""
    news_line_default: str = "all"
    news_line_sort: str = "new"


class User(BaseModel):
    """Identity record."""

    id: str
    email: str
    name: str
    encrypted_password: str
    salt: str
    role: UserRole = UserRole.PERSONAL
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_url: Optional[str] = None
    settings: UserSettings = Field(default_factory=UserSettings)
    created_at: datetime
    updated_at: datetime

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class UserAuth(BaseModel):
    """One authenticated device binding for a user."""

    id: str
    user_id: str
    device_label: str = UNKNOWN_DEVICE
    device: Optional[Dict[str, str]] = None
    issued_at: datetime
    expires_at: datetime
    revoked_at: Optional[datetime] = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.is_revoked and not self.is_expired(now)

    def state(self, now: datetime) -> SessionState:
        if self.is_revoked:
            return SessionState.REVOKED
        if self.is_expired(now):
            return SessionState.EXPIRED
        return SessionState.ACTIVE

    def revoke(self, now: datetime) -> "UserAuth":
        """Return the revoked copy of this session; revocation time never moves."""
        if self.is_revoked:
            return self
        return self.model_copy(update={"revoked_at": now})

    def __repr__(self):
        return f"<UserAuth(id={self.id}, user_id={self.user_id}, device={self.device_label})>"


class IssuedSession(BaseModel):
    """A freshly persisted session and the signed token that bears it."""

    model_config = ConfigDict(frozen=True)

    token: str
    session: UserAuth

    def __repr__(self):
        return f"<IssuedSession(session_id={self.session.id})>"
