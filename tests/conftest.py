"""Shared test fixtures for Inkwell backend tests."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.password import make_password_policy
from inkwell.auth.models import User
from inkwell.auth.services import (
    CookieBinder,
    CredentialStore,
    DeviceDetector,
    SessionManager,
    SessionPolicy,
    TokenSigner,
)
from inkwell.config import Settings
from inkwell.repositories import InMemoryAuthRepository, InMemoryUserRepository

TEST_SECRET = "test-signing-secret-0123456789abcdef"
PASSWORD = "Str0ngP@ss"
WINDOWS_UA = "Mozilla/5.0 (Windows NT 10.0)"
MAC_SAFARI_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15"
)
IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)


class FakeClock:
    """Controllable UTC clock injected in place of datetime.now."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # update_one etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def fake_clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        JWT_SECRET=TEST_SECRET,
        STORAGE_BACKEND="memory",
        BCRYPT_ROUNDS=4,
        SESSION_TTL_HOURS=24,
        SESSION_COOKIE_SECURE=False,
    )


@pytest.fixture
def credential_store():
    return CredentialStore(rounds=4)


@pytest.fixture
def password_policy():
    return make_password_policy(min_length=8, max_length=128)


@pytest.fixture
def device_detector():
    return DeviceDetector()


@pytest.fixture
def token_signer():
    return TokenSigner(TEST_SECRET)


@pytest.fixture
def session_policy():
    return SessionPolicy(ttl=timedelta(hours=24))


@pytest.fixture
def auth_repository():
    return InMemoryAuthRepository()


@pytest.fixture
def user_repository(auth_repository):
    return InMemoryUserRepository(auth_repository)


@pytest.fixture
def session_manager(
    user_repository, auth_repository, credential_store,
    device_detector, token_signer, session_policy, fake_clock,
):
    return SessionManager(
        user_repository=user_repository,
        auth_repository=auth_repository,
        credential_store=credential_store,
        device_detector=device_detector,
        token_signer=token_signer,
        policy=session_policy,
        clock=fake_clock,
    )


@pytest.fixture
def cookie_binder():
    return CookieBinder(cookie_name="inkwell_session", max_age=86400, secure=False)


@pytest.fixture
def make_user(credential_store, fake_clock):
    """Build (not store) a user whose password is hashed with the test store."""

    def _make_user(email: str = "alice@example.com", password: str = PASSWORD, name: str = "Alice") -> User:
        encrypted_password, salt = credential_store.hash(password)
        return User(
            id=str(ObjectId()),
            email=email,
            name=name,
            encrypted_password=encrypted_password,
            salt=salt,
            created_at=fake_clock(),
            updated_at=fake_clock(),
        )

    return _make_user
