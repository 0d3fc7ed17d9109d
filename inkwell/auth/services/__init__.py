"""
Auth System Services

Contains service classes for authentication operations.
"""

from inkwell.auth.services.credential_store import CredentialStore
from inkwell.auth.services.device_detector import DeviceDetector, DeviceInfo
from inkwell.auth.services.token_signer import TokenSigner
from inkwell.auth.services.session_manager import SessionManager, SessionPolicy
from inkwell.auth.services.cookie_binder import CookieBinder

__all__ = [
    "CredentialStore",
    "DeviceDetector",
    "DeviceInfo",
    "TokenSigner",
    "SessionManager",
    "SessionPolicy",
    "CookieBinder",
]
