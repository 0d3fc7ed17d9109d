"""
Inkwell Middleware.

All middleware components are imported here.
"""

from inkwell.middleware.auth import AuthMiddleware

__all__ = [
    "AuthMiddleware",
]
