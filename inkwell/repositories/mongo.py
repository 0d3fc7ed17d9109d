"""
MongoDB repositories for users and device sessions.

Users live in the "users" collection with their feed settings embedded;
sessions live in "userAuth", one document per device session.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from inkwell.auth.errors import EmailTakenError, PersistenceError, SessionConflictError
from inkwell.auth.models import User, UserAuth, UserRole, UserSettings
from inkwell.auth.repositories import AuthRepository, UserRepository

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
SESSIONS_COLLECTION = "userAuth"

ONE_ACTIVE_SESSION_INDEX = "one_unrevoked_session_per_device"


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """Mongo stores UTC; clients without tz_aware hand back naive datetimes."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _object_id(value: str) -> Optional[ObjectId]:
    return ObjectId(value) if ObjectId.is_valid(value) else None


# ─────────────────────────────────────────────────────────────────
# Document mapping
# ─────────────────────────────────────────────────────────────────

def user_to_doc(user: User) -> dict:
    return {
        "_id": ObjectId(user.id),
        "email": user.email,
        "name": user.name,
        "encryptedPassword": user.encrypted_password,
        "salt": user.salt,
        "role": user.role.value,
        "description": user.description,
        "avatarUrl": user.avatar_url,
        "coverUrl": user.cover_url,
        "settings": {
            "newsLineDefault": user.settings.news_line_default,
            "newsLineSort": user.settings.news_line_sort,
        },
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }


def user_from_doc(doc: dict) -> User:
    settings = doc.get("settings") or {}
    return User(
        id=str(doc["_id"]),
        email=doc["email"],
        name=doc.get("name", ""),
        encrypted_password=doc["encryptedPassword"],
        salt=doc["salt"],
        role=UserRole(doc.get("role", UserRole.PERSONAL.value)),
        description=doc.get("description"),
        avatar_url=doc.get("avatarUrl"),
        cover_url=doc.get("coverUrl"),
        settings=UserSettings(
            news_line_default=settings.get("newsLineDefault", "all"),
            news_line_sort=settings.get("newsLineSort", "new"),
        ),
        created_at=_aware(doc["createdAt"]),
        updated_at=_aware(doc["updatedAt"]),
    )


def session_to_doc(session: UserAuth) -> dict:
    return {
        "_id": ObjectId(session.id),
        "userId": ObjectId(session.user_id),
        "deviceLabel": session.device_label,
        "device": session.device,
        "issuedAt": session.issued_at,
        "expiresAt": session.expires_at,
        "revokedAt": session.revoked_at,
        # mirror of revokedAt for the partial unique index
        "revoked": session.is_revoked,
    }


def session_from_doc(doc: dict) -> UserAuth:
    return UserAuth(
        id=str(doc["_id"]),
        user_id=str(doc["userId"]),
        device_label=doc["deviceLabel"],
        device=doc.get("device"),
        issued_at=_aware(doc["issuedAt"]),
        expires_at=_aware(doc["expiresAt"]),
        revoked_at=_aware(doc.get("revokedAt")),
    )


# ─────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────

class MongoUserRepository(UserRepository):
    """
    User repository backed by the users collection.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize MongoUserRepository.

        Args:
            db: MongoDB database connection
        """
        self._users_collection = db[USERS_COLLECTION]
        self._sessions_collection = db[SESSIONS_COLLECTION]

    async def ensure_indexes(self) -> None:
        """Create the unique email index."""
        op = "mongo.UserRepository.ensure_indexes"
        try:
            await self._users_collection.create_index(
                [("email", ASCENDING)], unique=True, name="unique_email"
            )
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

    async def find_by_email(self, email: str) -> Optional[User]:
        op = "mongo.UserRepository.find_by_email"
        try:
            doc = await self._users_collection.find_one({"email": email})
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        return user_from_doc(doc) if doc else None

    async def find_by_id(self, user_id: str) -> Optional[User]:
        op = "mongo.UserRepository.find_by_id"
        oid = _object_id(user_id)
        if oid is None:
            return None

        try:
            doc = await self._users_collection.find_one({"_id": oid})
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        return user_from_doc(doc) if doc else None

    async def find_by_auth_id(self, session_id: str) -> Optional[User]:
        op = "mongo.UserRepository.find_by_auth_id"
        oid = _object_id(session_id)
        if oid is None:
            return None

        try:
            session_doc = await self._sessions_collection.find_one(
                {"_id": oid}, {"userId": 1}
            )
            if not session_doc:
                return None
            doc = await self._users_collection.find_one({"_id": session_doc["userId"]})
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        return user_from_doc(doc) if doc else None

    async def create(self, user: User) -> None:
        op = "mongo.UserRepository.create"
        try:
            await self._users_collection.insert_one(user_to_doc(user))
        except DuplicateKeyError as e:
            raise EmailTakenError() from e
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        logger.info(f"User created: {user.id}")

    async def update_password(
        self,
        user_id: str,
        encrypted_password: str,
        salt: str,
        updated_at: datetime,
    ) -> None:
        op = "mongo.UserRepository.update_password"
        oid = _object_id(user_id)
        if oid is None:
            raise PersistenceError(op)

        try:
            result = await self._users_collection.update_one(
                {"_id": oid},
                {
                    "$set": {
                        "encryptedPassword": encrypted_password,
                        "salt": salt,
                        "updatedAt": updated_at,
                    }
                },
            )
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        if result.matched_count == 0:
            raise PersistenceError(op)


# ─────────────────────────────────────────────────────────────────
# Sessions
# ─────────────────────────────────────────────────────────────────

class MongoAuthRepository(AuthRepository):
    """
    Session repository backed by the userAuth collection.

    A partial unique index on (userId, deviceLabel) over non-revoked rows
    keeps concurrent sign-ins from the same device from both succeeding.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize MongoAuthRepository.

        Args:
            db: MongoDB database connection
        """
        self._sessions_collection = db[SESSIONS_COLLECTION]

    async def ensure_indexes(self) -> None:
        """Create lookup, sweep and one-active-session-per-device indexes."""
        op = "mongo.AuthRepository.ensure_indexes"
        try:
            await self._sessions_collection.create_index(
                [("userId", ASCENDING), ("deviceLabel", ASCENDING)],
                unique=True,
                partialFilterExpression={"revoked": False},
                name=ONE_ACTIVE_SESSION_INDEX,
            )
            await self._sessions_collection.create_index(
                [("userId", ASCENDING), ("issuedAt", DESCENDING)],
                name="user_sessions",
            )
            await self._sessions_collection.create_index(
                [("expiresAt", ASCENDING)],
                name="session_expiry",
            )
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

    async def create(self, session: UserAuth) -> None:
        op = "mongo.AuthRepository.create"
        try:
            await self._sessions_collection.insert_one(session_to_doc(session))
        except DuplicateKeyError as e:
            logger.warning(
                f"Concurrent session for user {session.user_id} on {session.device_label}"
            )
            raise SessionConflictError() from e
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

    async def get_by_id(self, session_id: str) -> Optional[UserAuth]:
        op = "mongo.AuthRepository.get_by_id"
        oid = _object_id(session_id)
        if oid is None:
            return None

        try:
            doc = await self._sessions_collection.find_one({"_id": oid})
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        return session_from_doc(doc) if doc else None

    async def update(self, session: UserAuth) -> None:
        op = "mongo.AuthRepository.update"
        oid = _object_id(session.id)
        if oid is None:
            raise PersistenceError(op)

        try:
            result = await self._sessions_collection.update_one(
                {"_id": oid},
                {
                    "$set": {
                        "revokedAt": session.revoked_at,
                        "revoked": session.is_revoked,
                    }
                },
            )
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        if result.matched_count == 0:
            raise PersistenceError(op)

    async def delete_item(self, session_id: str) -> None:
        op = "mongo.AuthRepository.delete_item"
        oid = _object_id(session_id)
        if oid is None:
            return

        try:
            await self._sessions_collection.delete_one({"_id": oid})
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

    async def list_by_user(
        self,
        user_id: str,
        device_label: Optional[str] = None,
    ) -> List[UserAuth]:
        op = "mongo.AuthRepository.list_by_user"
        oid = _object_id(user_id)
        if oid is None:
            return []

        query = {"userId": oid}
        if device_label is not None:
            query["deviceLabel"] = device_label

        try:
            cursor = self._sessions_collection.find(query).sort("issuedAt", DESCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        return [session_from_doc(doc) for doc in docs]

    async def list_expired(self, before: datetime) -> List[UserAuth]:
        op = "mongo.AuthRepository.list_expired"
        try:
            cursor = self._sessions_collection.find({"expiresAt": {"$lt": before}})
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise PersistenceError(op, e) from e

        return [session_from_doc(doc) for doc in docs]
