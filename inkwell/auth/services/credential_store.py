"""
Password hashing and verification.

bcrypt with SHA-256 pre-hashing. The salt is generated per call and stored
next to the hash so verification can recompute it.
"""

import base64
import hashlib
import hmac
from typing import Tuple

import bcrypt

from inkwell.auth.errors import CredentialError


class CredentialStore:
    """
    Turns plaintext passwords into storage-safe form and checks them.
    """

    MAX_PASSWORD_LENGTH = 128

    def __init__(self, max_length: int = MAX_PASSWORD_LENGTH, rounds: int = 12):
        """
        Initialize CredentialStore.

        Args:
            max_length: Longest accepted plaintext, in characters
            rounds: bcrypt cost factor (4-31)
        """
        self._max_length = max_length
        self._rounds = rounds

    @staticmethod
    def _prehash_password(password: str) -> bytes:
        """
        Pre-hash password with SHA-256 before bcrypt.

        This handles bcrypt's 72-byte limit and ensures consistent
        behavior across all password lengths.
        """
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash)

    def hash(self, plaintext: str) -> Tuple[str, str]:
        """
        Hash a password with a freshly generated salt.

        Args:
            plaintext: Password as typed by the user

        Returns:
            tuple of (encrypted_password, salt)

        Raises:
            CredentialError: Empty password or longer than the maximum length
        """
        if not plaintext:
            raise CredentialError(errors=["Password must not be empty"])
        if len(plaintext) > self._max_length:
            raise CredentialError(
                errors=[f"Password must be no more than {self._max_length} characters"]
            )

        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(self._prehash_password(plaintext), salt)
        return hashed.decode("utf-8"), salt.decode("utf-8")

    def verify(self, plaintext: str, encrypted_password: str, salt: str) -> bool:
        """
        Verify a password against its stored hash and salt.

        The recomputed hash is compared in constant time. Malformed stored
        values never match.
        """
        if not plaintext or not encrypted_password or not salt:
            return False
        if len(plaintext) > self._max_length:
            return False

        try:
            candidate = bcrypt.hashpw(self._prehash_password(plaintext), salt.encode("utf-8"))
        except ValueError:
            return False

        return hmac.compare_digest(candidate, encrypted_password.encode("utf-8"))
