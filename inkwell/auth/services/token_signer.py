"""
Session token signing.

Tokens are JWTs whose payload names the session, not the user, so that
revoking the session row immediately disables the token.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from jose import jwt
from jose.exceptions import JWTError

from inkwell.auth.errors import TokenExpiredError, TokenInvalidError

logger = logging.getLogger(__name__)


class TokenSigner:
    """
    Signs and verifies session tokens with the process-wide secret.

    The secret is fixed at construction; rotating it means deploying with
    a new configuration.
    """

    SESSION_CLAIM = "sid"

    def __init__(self, secret: str, algorithm: str = "HS256"):
        """
        Initialize TokenSigner.

        Args:
            secret: Secret key for JWT signing
            algorithm: JWT algorithm (default: HS256)
        """
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def encode(self, session_id: str, expires_at: datetime, issued_at: datetime) -> str:
        """Create a signed token for a session."""
        payload = {
            self.SESSION_CLAIM: session_id,
            "exp": expires_at,
            "iat": issued_at,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str, now: Optional[datetime] = None) -> str:
        """
        Verify a token and return the session ID it carries.

        Args:
            token: Signed token
            now: Reference time for the expiry check (defaults to current UTC time)

        Raises:
            TokenInvalidError: Bad signature, malformed token or missing claims
            TokenExpiredError: The expiry claim is not after `now`
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug(f"Token rejected: {e.__class__.__name__}")
            raise TokenInvalidError() from e

        session_id = payload.get(self.SESSION_CLAIM)
        expires = payload.get("exp")
        if not isinstance(session_id, str) or not session_id:
            raise TokenInvalidError()
        if not isinstance(expires, (int, float)) or isinstance(expires, bool):
            raise TokenInvalidError()

        now = now or datetime.now(timezone.utc)
        if expires <= now.timestamp():
            raise TokenExpiredError()

        return session_id

    def __repr__(self):
        return f"<TokenSigner(algorithm={self._algorithm})>"
