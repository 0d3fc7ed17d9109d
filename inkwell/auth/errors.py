"""
Authentication error taxonomy.

Each error keeps its own type for internal handling while rendering through
the platform's APIException envelope. NotFoundError and
InvalidCredentialsError deliberately share one message and code so a client
cannot tell an unknown email from a wrong password.
"""

from typing import List, Optional

from common.utils.exceptions import (
    ConflictException,
    InternalServerException,
    UnauthorizedException,
    ValidationException,
)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_CREDENTIALS_CODE = "INVALID_CREDENTIALS"


class ValidationError(ValidationException):
    """Malformed input that the caller can fix and resend."""

    def __init__(self, message: str = "Validation error", field: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field} if field else None,
        )


class CredentialError(ValidationException):
    """Password rejected by the acceptance policy or the credential store."""

    def __init__(
        self,
        message: str = "Password does not meet requirements",
        errors: Optional[List[str]] = None,
    ):
        super().__init__(message=message, code="WEAK_PASSWORD", errors=errors)


class InvalidCredentialsError(UnauthorizedException):
    """Password does not match the stored credential."""

    def __init__(self):
        super().__init__(message=INVALID_CREDENTIALS_MESSAGE, code=INVALID_CREDENTIALS_CODE)


class NotFoundError(UnauthorizedException):
    """No account for the supplied email."""

    def __init__(self):
        super().__init__(message=INVALID_CREDENTIALS_MESSAGE, code=INVALID_CREDENTIALS_CODE)


class TokenInvalidError(UnauthorizedException):
    """Bad signature or malformed token payload."""

    def __init__(self):
        super().__init__(message="Invalid session token", code="INVALID_TOKEN")


class TokenExpiredError(UnauthorizedException):
    """The token's own expiry claim has passed."""

    def __init__(self):
        super().__init__(message="Session has expired", code="TOKEN_EXPIRED")


class SessionRevokedError(UnauthorizedException):
    """The session behind a valid token is revoked or gone."""

    def __init__(self):
        super().__init__(message="Session is no longer valid", code="SESSION_REVOKED")


class EmailTakenError(ConflictException):
    def __init__(self):
        super().__init__(
            message="An account with this email already exists",
            code="EMAIL_TAKEN",
        )


class SessionConflictError(ConflictException):
    """A concurrent sign-in already holds the active session for this device."""

    def __init__(self):
        super().__init__(
            message="Another sign-in from this device is in progress",
            code="SESSION_CONFLICT",
        )


class PersistenceError(InternalServerException):
    """
    Repository failure.

    Clients only ever see the generic 500 envelope; the originating
    operation and the driver error stay on the exception for logging.
    """

    def __init__(self, op: str, cause: Optional[BaseException] = None):
        super().__init__()
        self.op = op
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.op
        return f"{self.op}: {self.cause.__class__.__name__}: {self.cause}"
