"""
Session token transport.

The only place that knows how a token travels over HTTP: a secure,
http-only cookie on the way out, and the cookie (or a Bearer header from
API clients) on the way in.
"""

from typing import Optional

from fastapi import Request, Response


class CookieBinder:
    """
    Binds session tokens to responses and reads them back from requests.
    """

    def __init__(
        self,
        cookie_name: str,
        max_age: int,
        secure: bool = True,
        samesite: str = "lax",
        domain: Optional[str] = None,
        path: str = "/",
    ):
        """
        Initialize CookieBinder.

        Args:
            cookie_name: Name of the session cookie
            max_age: Cookie lifetime in seconds, mirroring the session TTL
            secure: Only send the cookie over HTTPS
            samesite: SameSite attribute ("lax", "strict" or "none")
            domain: Optional cookie domain
            path: Cookie path
        """
        self._cookie_name = cookie_name
        self._max_age = max_age
        self._secure = secure
        self._samesite = samesite.lower()
        self._domain = domain
        self._path = path

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def attach(self, token: str, response: Response) -> None:
        """Write the session cookie to an outbound response."""
        response.set_cookie(
            key=self._cookie_name,
            value=token,
            max_age=self._max_age,
            path=self._path,
            domain=self._domain,
            secure=self._secure,
            httponly=True,
            samesite=self._samesite,
        )

    def clear(self, response: Response) -> None:
        """Expire the session cookie on the client."""
        response.delete_cookie(
            key=self._cookie_name,
            path=self._path,
            domain=self._domain,
            secure=self._secure,
            httponly=True,
            samesite=self._samesite,
        )

    def extract(self, request: Request) -> Optional[str]:
        """
        Read the session token from an inbound request.

        Returns:
            Token string, or None for anonymous requests

        Expected format: session cookie, or "Authorization: Bearer <token>"
        """
        token = request.cookies.get(self._cookie_name)
        if token:
            return token

        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return None

        parts = auth_header.split()

        if len(parts) != 2:
            return None

        scheme, token = parts

        if scheme.lower() != "bearer":
            return None

        return token
