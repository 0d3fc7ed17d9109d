"""
Repository interfaces consumed by the session core.

Defines the storage contract for users and device sessions. Implementations
live in inkwell.repositories (MongoDB and in-process memory) and can be
swapped without touching the SessionManager.

Lookups return None when nothing matches. Storage failures are raised as
PersistenceError carrying the failing operation name.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from inkwell.auth.models import User, UserAuth


class UserRepository(ABC):
    """User read model and credential writes."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by normalized (lowercase) email."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by ID."""
        pass

    @abstractmethod
    async def find_by_auth_id(self, session_id: str) -> Optional[User]:
        """Find the user owning the given session, whatever its state."""
        pass

    @abstractmethod
    async def create(self, user: User) -> None:
        """
        Insert a new user.

        Raises:
            EmailTakenError: The email is already registered
        """
        pass

    @abstractmethod
    async def update_password(
        self,
        user_id: str,
        encrypted_password: str,
        salt: str,
        updated_at: datetime,
    ) -> None:
        """Replace the stored password hash and salt."""
        pass


class AuthRepository(ABC):
    """
    Session store.

    At most one non-revoked row may exist per (user_id, device_label);
    create() raises SessionConflictError when that would be violated.
    """

    @abstractmethod
    async def create(self, session: UserAuth) -> None:
        pass

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[UserAuth]:
        pass

    @abstractmethod
    async def update(self, session: UserAuth) -> None:
        """Persist the mutable part of a session (its revocation)."""
        pass

    @abstractmethod
    async def delete_item(self, session_id: str) -> None:
        """Remove a session row. Missing rows are ignored."""
        pass

    @abstractmethod
    async def list_by_user(
        self,
        user_id: str,
        device_label: Optional[str] = None,
    ) -> List[UserAuth]:
        """All sessions of a user in any state, newest first, optionally for one device."""
        pass

    @abstractmethod
    async def list_expired(self, before: datetime) -> List[UserAuth]:
        """Sessions whose expiry is earlier than `before`."""
        pass
