"""
Auth System

Handles identity verification and per-device sessions: password
credentials, device labels, signed session tokens and the session cookie.
"""

from inkwell.auth.services.credential_store import CredentialStore
from inkwell.auth.services.device_detector import DeviceDetector
from inkwell.auth.services.token_signer import TokenSigner
from inkwell.auth.services.session_manager import SessionManager, SessionPolicy
from inkwell.auth.services.cookie_binder import CookieBinder
from inkwell.auth.models import IssuedSession, SessionState, User, UserAuth

__all__ = [
    "CredentialStore",
    "DeviceDetector",
    "TokenSigner",
    "SessionManager",
    "SessionPolicy",
    "CookieBinder",
    "IssuedSession",
    "SessionState",
    "User",
    "UserAuth",
]
