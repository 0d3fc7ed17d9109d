"""
Session management for user authentication.

Authenticates credentials and manages the lifecycle of per-device sessions:
issued -> active -> (revoked | expired). Sessions are rows in the auth
repository addressed by their own ID; the signed token carries that ID.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict

from common.utils.exceptions import APIException
from inkwell.auth.errors import (
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    SessionRevokedError,
    TokenExpiredError,
)
from inkwell.auth.models import UNKNOWN_DEVICE, IssuedSession, User, UserAuth
from inkwell.auth.repositories import AuthRepository, UserRepository
from inkwell.auth.services.credential_store import CredentialStore
from inkwell.auth.services.device_detector import DeviceDetector
from inkwell.auth.services.token_signer import TokenSigner

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class SessionPolicy(BaseModel):
    """Session lifetime, fixed at startup."""

    model_config = ConfigDict(frozen=True)

    ttl: timedelta = timedelta(days=30)

    @property
    def max_age_seconds(self) -> int:
        return int(self.ttl.total_seconds())


class SessionManager:
    """
    Handles authentication and session lifecycle.
    Repositories are the single source of truth; nothing is cached here.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        auth_repository: AuthRepository,
        credential_store: CredentialStore,
        device_detector: DeviceDetector,
        token_signer: TokenSigner,
        policy: SessionPolicy,
        clock: Clock = utcnow,
    ):
        """
        Initialize SessionManager.

        Args:
            user_repository: User lookups and credential writes
            auth_repository: Session store
            credential_store: Password hashing and verification
            device_detector: Resolves device labels from User-Agent strings
            token_signer: Signs tokens with the process-wide secret
            policy: Session lifetime
            clock: Source of the current time (timezone-aware)
        """
        self._users = user_repository
        self._sessions = auth_repository
        self._credentials = credential_store
        self._device_detector = device_detector
        self._signer = token_signer
        self._policy = policy
        self._clock = clock
        self._dummy_credential: Optional[Tuple[str, str]] = None

    @property
    def policy(self) -> SessionPolicy:
        return self._policy

    async def _call(self, op: str, awaitable: Awaitable[T]) -> T:
        """Await a repository call, wrapping unexpected failures as PersistenceError."""
        try:
            return await awaitable
        except APIException:
            raise
        except Exception as e:
            raise PersistenceError(op, e) from e

    @staticmethod
    def _log_detached_write(write: "asyncio.Future") -> None:
        """Report the outcome of a session write whose request was cancelled."""
        if write.cancelled():
            return
        error = write.exception()
        if isinstance(error, PersistenceError):
            logger.error(f"Detached session write failed in {error.op}", exc_info=error.cause)
        elif error is not None:
            logger.warning(f"Detached session write rejected: {error.code}")

    # ─────────────────────────────────────────────────────────────
    # Credentials
    # ─────────────────────────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check email and password.

        Args:
            email: Normalized email address
            password: Plaintext password

        Returns:
            The matching user

        Raises:
            NotFoundError: No account for this email
            InvalidCredentialsError: Password mismatch
        """
        user = await self._call(
            "SessionManager.authenticate", self._users.find_by_email(email)
        )

        if user is None:
            # same bcrypt cost as a real mismatch
            self._credentials.verify(password, *self._get_dummy_credential())
            logger.info("Authentication failed: unknown account")
            raise NotFoundError()

        if not self._credentials.verify(password, user.encrypted_password, user.salt):
            logger.info(f"Authentication failed for user {user.id}: password mismatch")
            raise InvalidCredentialsError()

        return user

    def verify_password(self, user: User, password: str) -> bool:
        """Check a password against the user's stored credential."""
        return self._credentials.verify(password, user.encrypted_password, user.salt)

    def _get_dummy_credential(self) -> Tuple[str, str]:
        if self._dummy_credential is None:
            self._dummy_credential = self._credentials.hash(str(ObjectId()))
        return self._dummy_credential

    # ─────────────────────────────────────────────────────────────
    # Issuing
    # ─────────────────────────────────────────────────────────────

    async def authorize(
        self,
        user: User,
        device_label: str,
        device: Optional[dict] = None,
    ) -> IssuedSession:
        """
        Create the session for (user, device), superseding any active one.

        Args:
            user: Authenticated user
            device_label: Normalized device label from DeviceDetector.resolve
            device: Optional detected device details stored with the session

        Returns:
            IssuedSession with the signed token and the persisted session

        Raises:
            PersistenceError: Repository failure; no token is returned
            SessionConflictError: A concurrent authorize won the device slot

        Side Effects:
            - Revokes the previous active session for the same device
            - Deletes expired rows for the same device
            - Inserts the new session row
        """
        op = "SessionManager.authorize"
        now = self._clock()
        label = device_label or UNKNOWN_DEVICE

        existing = await self._call(op, self._sessions.list_by_user(user.id, label))
        for previous in existing:
            if previous.is_revoked:
                continue
            if previous.is_expired(now):
                await self._call(op, self._sessions.delete_item(previous.id))
                continue
            await self._call(op, self._sessions.update(previous.revoke(now)))
            logger.info(f"Session {previous.id} superseded for user {user.id} on {label}")

        session = UserAuth(
            id=str(ObjectId()),
            user_id=user.id,
            device_label=label,
            device=dict(device) if device else None,
            issued_at=now,
            expires_at=now + self._policy.ttl,
        )
        token = self._signer.encode(session.id, session.expires_at, session.issued_at)

        # The write completes even if the request is cancelled meanwhile;
        # the token is only handed out once it has.
        write = asyncio.ensure_future(self._call(op, self._sessions.create(session)))
        try:
            await asyncio.shield(write)
        except asyncio.CancelledError:
            write.add_done_callback(self._log_detached_write)
            raise

        logger.info(f"Session {session.id} created for user {user.id} on {label}")
        return IssuedSession(token=token, session=session)

    async def authorize_user_agent(self, user: User, user_agent: Optional[str]) -> IssuedSession:
        """Authorize the device described by a raw User-Agent header."""
        device = self._device_detector.detect(user_agent)
        return await self.authorize(user, self._device_detector.label_for(device), device)

    # ─────────────────────────────────────────────────────────────
    # Resolving
    # ─────────────────────────────────────────────────────────────

    async def resolve_token(self, token: str) -> User:
        """
        Map a token back to its user.

        Raises:
            TokenInvalidError: Bad signature or malformed payload
            TokenExpiredError: Token or session past its expiry
            SessionRevokedError: Session revoked or missing
        """
        user, _ = await self.resolve_session(token)
        return user

    async def resolve_session(self, token: str) -> Tuple[User, UserAuth]:
        """
        Like resolve_token, also returning the session row.

        The token's own expiry and the session's revocation state are both
        checked; either one failing rejects the token.
        """
        op = "SessionManager.resolve_token"
        now = self._clock()
        session_id = self._signer.decode(token, now=now)

        session = await self._call(op, self._sessions.get_by_id(session_id))
        if session is None or session.is_revoked:
            raise SessionRevokedError()
        if session.is_expired(now):
            raise TokenExpiredError()

        user = await self._call(op, self._users.find_by_id(session.user_id))
        if user is None:
            raise SessionRevokedError()

        return user, session

    async def get_session(self, session_id: str) -> Optional[UserAuth]:
        return await self._call("SessionManager.get_session", self._sessions.get_by_id(session_id))

    async def session_owner(self, session_id: str) -> Optional[User]:
        """User who owns a session, in any state."""
        return await self._call(
            "SessionManager.session_owner", self._users.find_by_auth_id(session_id)
        )

    async def list_sessions(
        self,
        user_id: str,
        device_label: Optional[str] = None,
    ) -> List[UserAuth]:
        """Active sessions of a user, newest first, optionally for one device."""
        now = self._clock()
        sessions = await self._call(
            "SessionManager.list_sessions",
            self._sessions.list_by_user(user_id, device_label),
        )
        return [s for s in sessions if s.is_active(now)]

    # ─────────────────────────────────────────────────────────────
    # Revoking
    # ─────────────────────────────────────────────────────────────

    async def revoke(self, session_id: str) -> None:
        """
        Revoke a session.

        Idempotent: unknown and already revoked sessions are left as they are.
        """
        op = "SessionManager.revoke"
        session = await self._call(op, self._sessions.get_by_id(session_id))
        if session is None or session.is_revoked:
            return

        await self._call(op, self._sessions.update(session.revoke(self._clock())))
        logger.info(f"Session {session_id} revoked for user {session.user_id}")

    async def rotate_credential(
        self,
        user: User,
        new_password: str,
        keep_session_id: Optional[str] = None,
    ) -> int:
        """
        Replace the user's password and revoke their active sessions.

        Args:
            user: User whose credential changes
            new_password: New plaintext password (policy already applied)
            keep_session_id: Optional session to leave active (the caller's own)

        Returns:
            Number of sessions revoked

        Raises:
            CredentialError: Password rejected by the credential store
        """
        op = "SessionManager.rotate_credential"
        encrypted_password, salt = self._credentials.hash(new_password)
        now = self._clock()

        await self._call(
            op, self._users.update_password(user.id, encrypted_password, salt, now)
        )

        revoked_count = 0
        for session in await self._call(op, self._sessions.list_by_user(user.id)):
            if session.id == keep_session_id or not session.is_active(now):
                continue
            await self._call(op, self._sessions.update(session.revoke(now)))
            revoked_count += 1

        logger.info(f"Credential rotated for user {user.id}; revoked {revoked_count} sessions")
        return revoked_count
