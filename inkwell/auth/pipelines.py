"""
Auth system pipeline functions.

Stateless orchestration logic for authentication flows. Routers call these
with services from inkwell.auth.dependencies; the pipelines never touch
HTTP objects, so the cookie is attached by the caller.
"""

import logging
from typing import List, Optional

from bson import ObjectId

from common.utils.exceptions import BadRequestException
from common.utils.password import PasswordPolicy
from inkwell.auth.errors import (
    CredentialError,
    EmailTakenError,
    InvalidCredentialsError,
    ValidationError,
)
from inkwell.auth.models import IssuedSession, User, UserAuth
from inkwell.auth.repositories import UserRepository
from inkwell.auth.services.credential_store import CredentialStore
from inkwell.auth.services.session_manager import SessionManager, utcnow

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """
    Canonical form used for storage and lookups.

    Raises:
        ValidationError: Empty or not shaped like an address
    """
    normalized = (email or "").strip().lower()
    local, _, domain = normalized.partition("@")
    if not local or not domain or "@" in domain:
        raise ValidationError("Invalid email address", field="email")
    return normalized


def apply_password_policy(password_policy: PasswordPolicy, password: str) -> None:
    """
    Raises:
        CredentialError: The policy rejected the password
    """
    is_valid, errors = password_policy(password)
    if not is_valid:
        raise CredentialError(errors=errors)


async def sign_in_pipeline(
    session_manager: SessionManager,
    email: str,
    password: str,
    user_agent: str
) -> dict:
    """
    Orchestrates the sign-in flow.

    Args:
        session_manager: For authentication and session issuing
        email: Email as submitted
        password: Plaintext password
        user_agent: Client User-Agent header

    Returns:
        dict with user, sessionToken, sessionId and expiresAt

    Raises:
        ValidationError: Malformed email
        InvalidCredentialsError / NotFoundError: Rendered identically
        PersistenceError: Session could not be stored
    """
    user = await session_manager.authenticate(normalize_email(email), password)
    issued = await session_manager.authorize_user_agent(user, user_agent)

    logger.info(f"User signed in: {user.id}")

    return _format_auth_response(user, issued)


async def sign_up_pipeline(
    session_manager: SessionManager,
    user_repository: UserRepository,
    credential_store: CredentialStore,
    password_policy: PasswordPolicy,
    email: str,
    password: str,
    name: str,
    user_agent: str
) -> dict:
    """
    Orchestrates the registration flow: create the user, then authorize
    the device it registered from.

    Args:
        session_manager: For session issuing
        user_repository: For creating the user record
        credential_store: Hashes the password
        password_policy: Acceptance rule applied before hashing
        email: Email as submitted
        password: Plaintext password
        name: Display name
        user_agent: Client User-Agent header

    Returns:
        dict with user, sessionToken, sessionId and expiresAt

    Raises:
        ValidationError: Malformed email or blank name
        CredentialError: Password rejected by the policy
        EmailTakenError: Email already registered
    """
    normalized_email = normalize_email(email)

    display_name = (name or "").strip()
    if not display_name:
        raise ValidationError("Name is required", field="name")

    apply_password_policy(password_policy, password)

    if await user_repository.find_by_email(normalized_email):
        raise EmailTakenError()

    encrypted_password, salt = credential_store.hash(password)
    now = utcnow()

    user = User(
        id=str(ObjectId()),
        email=normalized_email,
        name=display_name,
        encrypted_password=encrypted_password,
        salt=salt,
        created_at=now,
        updated_at=now,
    )
    await user_repository.create(user)

    issued = await session_manager.authorize_user_agent(user, user_agent)

    logger.info(f"User registered: {user.id}")

    return _format_auth_response(user, issued)


async def resolve_current_user_pipeline(
    session_manager: SessionManager,
    token: Optional[str]
) -> Optional[User]:
    """
    Map the request's token to its user.

    Returns:
        The user, or None for an anonymous request (no token)

    Raises:
        TokenInvalidError, TokenExpiredError, SessionRevokedError
    """
    if not token:
        return None

    return await session_manager.resolve_token(token)


async def sign_out_pipeline(
    session_manager: SessionManager,
    session_id: Optional[str]
) -> dict:
    """
    Orchestrates the sign-out flow.

    Revokes the current session if there is one; signing out twice, or
    without a session, is still a success.
    """
    if session_id:
        await session_manager.revoke(session_id)
        logger.info(f"Session signed out: {session_id}")

    return {"message": "Logged out successfully"}


async def change_password_pipeline(
    session_manager: SessionManager,
    password_policy: PasswordPolicy,
    user: User,
    current_password: str,
    new_password: str,
    keep_session_id: Optional[str] = None
) -> dict:
    """
    Orchestrates the password change flow.

    Args:
        session_manager: For credential rotation
        password_policy: Acceptance rule for the new password
        user: Authenticated user
        current_password: Must match the stored credential
        new_password: Replacement password
        keep_session_id: Session left active (the one making the change)

    Returns:
        dict with revokedCount and message

    Raises:
        InvalidCredentialsError: Current password does not match
        CredentialError: New password rejected
    """
    if not session_manager.verify_password(user, current_password):
        raise InvalidCredentialsError()

    apply_password_policy(password_policy, new_password)

    revoked_count = await session_manager.rotate_credential(
        user,
        new_password,
        keep_session_id=keep_session_id
    )

    logger.info(f"Password changed for user {user.id}")

    return {
        "revokedCount": revoked_count,
        "message": "Password changed successfully"
    }


async def list_sessions_pipeline(
    session_manager: SessionManager,
    user: User,
    current_session_id: Optional[str]
) -> List[dict]:
    """
    Get all active sessions for a user.

    Returns:
        List of session dicts with isCurrent flag
    """
    sessions = await session_manager.list_sessions(user.id)

    return [
        _format_session_response(session, session.id == current_session_id)
        for session in sessions
    ]


async def revoke_session_pipeline(
    session_manager: SessionManager,
    user: User,
    session_id: str,
    current_session_id: Optional[str]
) -> dict:
    """
    Revoke one of the user's other sessions.

    Sessions that are unknown or belong to someone else are left alone and
    the call still succeeds, so session IDs cannot be probed.

    Raises:
        BadRequestException: Trying to revoke current session
    """
    if session_id == current_session_id:
        raise BadRequestException(
            message="Cannot revoke current session. Use logout instead.",
            code="CANNOT_REVOKE_CURRENT"
        )

    owner = await session_manager.session_owner(session_id)

    if owner is not None and owner.id == user.id:
        await session_manager.revoke(session_id)
        logger.info(f"Session {session_id} revoked for user {user.id}")

    return {"message": "Session revoked successfully"}


def _format_auth_response(user: User, issued: IssuedSession) -> dict:
    return {
        "user": format_user_response(user),
        "sessionToken": issued.token,
        "sessionId": issued.session.id,
        "expiresAt": issued.session.expires_at.isoformat()
    }


def format_user_response(user: User) -> dict:
    """Format user record for API response."""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "description": user.description,
        "avatarUrl": user.avatar_url,
        "coverUrl": user.cover_url,
        "settings": {
            "newsLineDefault": user.settings.news_line_default,
            "newsLineSort": user.settings.news_line_sort
        },
        "createdAt": user.created_at.isoformat()
    }


def _format_session_response(session: UserAuth, is_current: bool) -> dict:
    """Format session record for API response."""
    return {
        "id": session.id,
        "deviceLabel": session.device_label,
        "device": session.device,
        "issuedAt": session.issued_at.isoformat(),
        "expiresAt": session.expires_at.isoformat(),
        "isCurrent": is_current
    }
