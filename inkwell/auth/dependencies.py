"""
FastAPI dependencies for Auth system.

Provides dependency injection for auth-related services and middleware.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request

from common.utils.password import PasswordPolicy, make_password_policy
from inkwell.auth.models import User
from inkwell.auth.repositories import AuthRepository, UserRepository
from inkwell.auth.services.cookie_binder import CookieBinder
from inkwell.auth.services.credential_store import CredentialStore
from inkwell.auth.services.device_detector import DeviceDetector
from inkwell.auth.services.session_manager import (
    Clock,
    SessionManager,
    SessionPolicy,
    utcnow,
)
from inkwell.auth.services.token_signer import TokenSigner
from inkwell.config import Settings
from inkwell.middleware.auth import AuthMiddleware


@lru_cache()
def get_device_detector() -> DeviceDetector:
    """Get cached DeviceDetector instance."""
    return DeviceDetector()


_user_repository: UserRepository | None = None
_credential_store: CredentialStore | None = None
_password_policy: PasswordPolicy | None = None
_session_manager: SessionManager | None = None
_cookie_binder: CookieBinder | None = None
_auth_middleware: AuthMiddleware | None = None


def init_auth_services(
    user_repository: UserRepository,
    auth_repository: AuthRepository,
    settings: Settings,
    clock: Clock | None = None
) -> None:
    """
    Initialize auth services with repositories and settings.

    Called once at application startup.

    Args:
        user_repository: User store
        auth_repository: Session store
        settings: Application settings (JWT secret, session TTL, cookie, passwords)
        clock: Optional time source, defaults to the system UTC clock
    """
    global _user_repository, _credential_store, _password_policy
    global _session_manager, _cookie_binder, _auth_middleware

    policy = SessionPolicy(ttl=settings.get_session_ttl())

    _user_repository = user_repository
    _credential_store = CredentialStore(
        max_length=settings.PASSWORD_MAX_LENGTH,
        rounds=settings.BCRYPT_ROUNDS
    )
    _password_policy = make_password_policy(
        min_length=settings.PASSWORD_MIN_LENGTH,
        max_length=settings.PASSWORD_MAX_LENGTH
    )

    _session_manager = SessionManager(
        user_repository=user_repository,
        auth_repository=auth_repository,
        credential_store=_credential_store,
        device_detector=get_device_detector(),
        token_signer=TokenSigner(settings.signing_secret(), settings.JWT_ALGORITHM),
        policy=policy,
        clock=clock or utcnow
    )

    _cookie_binder = CookieBinder(
        cookie_name=settings.SESSION_COOKIE_NAME,
        max_age=policy.max_age_seconds,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        domain=settings.SESSION_COOKIE_DOMAIN
    )

    _auth_middleware = AuthMiddleware(
        session_manager=_session_manager,
        cookie_binder=_cookie_binder
    )


def get_user_repository() -> UserRepository:
    """Get user repository instance."""
    if _user_repository is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _user_repository


def get_credential_store() -> CredentialStore:
    """Get credential store instance."""
    if _credential_store is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _credential_store


def get_password_policy() -> PasswordPolicy:
    """Get the password acceptance policy."""
    if _password_policy is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _password_policy


def get_session_manager() -> SessionManager:
    """Get session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _session_manager


def get_cookie_binder() -> CookieBinder:
    """Get cookie binder instance."""
    if _cookie_binder is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _cookie_binder


def get_auth_middleware() -> AuthMiddleware:
    """Get auth middleware instance."""
    if _auth_middleware is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _auth_middleware


async def require_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> User:
    """
    Dependency that requires authentication.

    Usage:
        @router.get("/protected")
        async def protected_route(user: Annotated[User, Depends(require_auth)]):
            return {"user_id": user.id}
    """
    return await auth_middleware.require_auth(request)


async def optional_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> Optional[User]:
    """
    Dependency that optionally authenticates.

    Usage:
        @router.get("/public")
        async def public_route(user: Annotated[User | None, Depends(optional_auth)]):
            if user:
                return {"logged_in": True}
            return {"logged_in": False}
    """
    return await auth_middleware.optional_auth(request)


def get_current_session_id(request: Request) -> Optional[str]:
    """ID of the session resolved by require_auth/optional_auth, if any."""
    session = getattr(request.state, "session", None)
    return session.id if session is not None else None


def get_user_agent(request: Request) -> str:
    """Extract User-Agent from request."""
    return request.headers.get("User-Agent", "")
