"""
Authentication middleware for protected routes.

Validates session tokens and attaches user context to requests.
"""

import logging
from typing import Optional

from fastapi import Request

from common.utils.exceptions import UnauthorizedException
from inkwell.auth.models import User
from inkwell.auth.services.cookie_binder import CookieBinder
from inkwell.auth.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    Middleware that validates session and attaches user to request.
    """

    def __init__(self, session_manager: SessionManager, cookie_binder: CookieBinder):
        """
        Initialize AuthMiddleware.

        Args:
            session_manager: For session validation
            cookie_binder: Reads the token from the request
        """
        self._session_manager = session_manager
        self._cookie_binder = cookie_binder

    async def require_auth(self, request: Request) -> User:
        """
        Validate request is authenticated.

        Args:
            request: HTTP request object

        Returns:
            User attached to request

        Raises:
            UnauthorizedException: No token (AUTH_REQUIRED)
            TokenInvalidError, TokenExpiredError, SessionRevokedError:
                Token present but not usable

        Side Effects:
            - Attaches user to request.state.user
            - Attaches current session to request.state.session
        """
        token = self._cookie_binder.extract(request)

        if not token:
            raise UnauthorizedException(
                message="Authentication required",
                code="AUTH_REQUIRED"
            )

        user, session = await self._session_manager.resolve_session(token)

        request.state.user = user
        request.state.session = session

        return user

    async def optional_auth(self, request: Request) -> Optional[User]:
        """
        Attach user if authenticated, but don't require it.

        Args:
            request: HTTP request object

        Returns:
            User if authenticated, None otherwise

        Does not raise for missing or rejected tokens; storage failures
        still propagate.
        """
        try:
            return await self.require_auth(request)
        except UnauthorizedException as e:
            logger.debug(f"Optional auth failed: {e.code}")
            request.state.user = None
            request.state.session = None
            return None
