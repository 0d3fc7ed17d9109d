"""
Shared environment configuration.

Values are read from the process environment (and a local ``.env`` file when
present) by pydantic-settings. Applications subclass BaseAppSettings to add
their own keys.

Example:
    from common.config import BaseAppSettings

    class Settings(BaseAppSettings):
        SESSION_TTL_HOURS: int = 720

    settings = Settings()
    settings.validate_required()
"""

from typing import List, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION_MIN_SECRET_LENGTH = 32


class BaseAppSettings(BaseSettings):
    """
    Settings every service needs: storage, token signing, HTTP serving.

    Unknown environment keys are tolerated so subclasses and deployment
    tooling can share one ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=True,
    )

    # ==========================================================================
    # MongoDB
    # ==========================================================================
    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017",
        description="Connection string for the primary database",
    )
    MONGODB_DATABASE: str = "inkwell"
    MONGODB_TIMEOUT_MS: int = Field(
        default=5000,
        ge=1,
        description="Server selection, connect and socket timeout in milliseconds",
    )

    # ==========================================================================
    # Token Signing
    # ==========================================================================
    JWT_SECRET: Optional[SecretStr] = Field(
        default=None,
        description="HMAC key for session tokens; never logged",
    )
    JWT_ALGORITHM: str = "HS256"

    # ==========================================================================
    # HTTP
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    CORS_ORIGINS: str = "*"  # "*" or comma-separated list
    CORS_ALLOW_CREDENTIALS: bool = True

    def signing_secret(self) -> str:
        """Plain-text token signing key, or "" when unset."""
        if self.JWT_SECRET is None:
            return ""
        return self.JWT_SECRET.get_secret_value()

    def get_cors_origins(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    def validate_required(self) -> None:
        """
        Fail fast on configuration the service cannot run with.

        Raises:
            ValueError: Listing every problem found
        """
        secret = self.signing_secret()
        problems = []

        if not secret:
            problems.append("JWT_SECRET is required to sign session tokens")
        elif self.is_production() and len(secret) < PRODUCTION_MIN_SECRET_LENGTH:
            problems.append(
                f"JWT_SECRET must be at least {PRODUCTION_MIN_SECRET_LENGTH} characters in production"
            )

        if problems:
            raise ValueError("Configuration errors:\n- " + "\n- ".join(problems))
