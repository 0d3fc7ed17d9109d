"""
In-process repositories.

Used for local development (STORAGE_BACKEND=memory) and tests. They follow
the same contract as the MongoDB repositories, including the one
unrevoked session per device rule, and hand out copies so callers cannot
mutate stored records behind the repository's back.
"""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from inkwell.auth.errors import EmailTakenError, PersistenceError, SessionConflictError
from inkwell.auth.models import User, UserAuth
from inkwell.auth.repositories import AuthRepository, UserRepository


class InMemoryAuthRepository(AuthRepository):
    """Session store kept in a dict keyed by session ID."""

    def __init__(self):
        self._sessions: Dict[str, UserAuth] = {}
        self._lock = asyncio.Lock()

    async def create(self, session: UserAuth) -> None:
        async with self._lock:
            if session.id in self._sessions:
                raise SessionConflictError()

            if not session.is_revoked:
                for stored in self._sessions.values():
                    if (
                        stored.user_id == session.user_id
                        and stored.device_label == session.device_label
                        and not stored.is_revoked
                    ):
                        raise SessionConflictError()

            self._sessions[session.id] = session.model_copy(deep=True)

    async def get_by_id(self, session_id: str) -> Optional[UserAuth]:
        stored = self._sessions.get(session_id)
        return stored.model_copy(deep=True) if stored else None

    async def update(self, session: UserAuth) -> None:
        async with self._lock:
            if session.id not in self._sessions:
                raise PersistenceError("memory.AuthRepository.update")
            self._sessions[session.id] = session.model_copy(deep=True)

    async def delete_item(self, session_id: str) -> None:
        async with self._lock:
            self._sessions.pop(session_id, None)

    async def list_by_user(
        self,
        user_id: str,
        device_label: Optional[str] = None,
    ) -> List[UserAuth]:
        sessions = [
            s for s in self._sessions.values()
            if s.user_id == user_id
            and (device_label is None or s.device_label == device_label)
        ]
        sessions.sort(key=lambda s: s.issued_at, reverse=True)
        return [s.model_copy(deep=True) for s in sessions]

    async def list_expired(self, before: datetime) -> List[UserAuth]:
        return [
            s.model_copy(deep=True)
            for s in self._sessions.values()
            if s.expires_at < before
        ]


class InMemoryUserRepository(UserRepository):
    """
    User store kept in a dict keyed by user ID.

    find_by_auth_id needs the session store, so it is passed in.
    """

    def __init__(self, auth_repository: Optional[InMemoryAuthRepository] = None):
        self._users: Dict[str, User] = {}
        self._auth_repository = auth_repository
        self._lock = asyncio.Lock()

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def find_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def find_by_auth_id(self, session_id: str) -> Optional[User]:
        if self._auth_repository is None:
            return None

        session = await self._auth_repository.get_by_id(session_id)
        if session is None:
            return None

        return await self.find_by_id(session.user_id)

    async def create(self, user: User) -> None:
        async with self._lock:
            if any(u.email == user.email for u in self._users.values()):
                raise EmailTakenError()
            self._users[user.id] = user.model_copy(deep=True)

    async def update_password(
        self,
        user_id: str,
        encrypted_password: str,
        salt: str,
        updated_at: datetime,
    ) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise PersistenceError("memory.UserRepository.update_password")

            self._users[user_id] = user.model_copy(
                update={
                    "encrypted_password": encrypted_password,
                    "salt": salt,
                    "updated_at": updated_at,
                }
            )
