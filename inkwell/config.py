"""
Inkwell application settings.

Extends the base settings with session, cookie and password configuration.
"""

from datetime import timedelta
from typing import Optional

from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Inkwell-specific settings."""

    # ==========================================================================
    # Storage
    # ==========================================================================
    STORAGE_BACKEND: str = "mongo"  # "mongo" or "memory"

    # ==========================================================================
    # Session Settings
    # ==========================================================================
    # Lifetime of a device session and of its signed token
    SESSION_TTL_HOURS: int = 720

    # Retention of expired session rows before the sweep job deletes them
    SESSION_SWEEP_RETENTION_HOURS: int = 0

    # ==========================================================================
    # Session Cookie
    # ==========================================================================
    SESSION_COOKIE_NAME: str = "inkwell_session"
    SESSION_COOKIE_SECURE: bool = True
    SESSION_COOKIE_SAMESITE: str = "lax"  # lax, strict, none
    SESSION_COOKIE_DOMAIN: Optional[str] = None

    # ==========================================================================
    # Passwords
    # ==========================================================================
    PASSWORD_MIN_LENGTH: int = 8
    PASSWORD_MAX_LENGTH: int = 128
    BCRYPT_ROUNDS: int = 12

    def get_session_ttl(self) -> timedelta:
        """Session lifetime as a timedelta."""
        return timedelta(hours=self.SESSION_TTL_HOURS)

    def get_sweep_retention(self) -> timedelta:
        """How long expired sessions are kept before purging."""
        return timedelta(hours=self.SESSION_SWEEP_RETENTION_HOURS)

    def uses_memory_storage(self) -> bool:
        """Check if repositories should be kept in process memory."""
        return self.STORAGE_BACKEND.lower() == "memory"


# Global settings instance
settings = Settings()
