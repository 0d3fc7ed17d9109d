"""Unit tests for CredentialStore (bcrypt with per-call salt)."""

import pytest

from inkwell.auth.errors import CredentialError
from inkwell.auth.services.credential_store import CredentialStore


@pytest.fixture
def store():
    return CredentialStore(max_length=32, rounds=4)


# ─────────────────────────────────────────────────────────────────
# hash
# ─────────────────────────────────────────────────────────────────


class TestHash:
    def test_returns_hash_and_salt_strings(self, store):
        encrypted_password, salt = store.hash("Str0ngP@ss")

        assert isinstance(encrypted_password, str)
        assert isinstance(salt, str)
        assert encrypted_password.startswith(salt)
        assert "Str0ngP@ss" not in encrypted_password

    def test_fresh_salt_per_call(self, store):
        first, first_salt = store.hash("Str0ngP@ss")
        second, second_salt = store.hash("Str0ngP@ss")

        assert first_salt != second_salt
        assert first != second

    def test_uses_configured_cost(self, store):
        _, salt = store.hash("Str0ngP@ss")

        assert salt.startswith("$2b$04$")

    def test_empty_password_rejected(self, store):
        with pytest.raises(CredentialError) as exc_info:
            store.hash("")

        assert exc_info.value.status_code == 422
        assert exc_info.value.code == "WEAK_PASSWORD"

    def test_overlong_password_rejected(self, store):
        with pytest.raises(CredentialError):
            store.hash("A1" * 20)

    def test_long_passwords_beyond_bcrypt_limit_stay_distinct(self):
        store = CredentialStore(rounds=4)
        prefix = "x" * 80
        encrypted_password, salt = store.hash(prefix + "A")

        assert store.verify(prefix + "A", encrypted_password, salt) is True
        assert store.verify(prefix + "B", encrypted_password, salt) is False


# ─────────────────────────────────────────────────────────────────
# verify
# ─────────────────────────────────────────────────────────────────


class TestVerify:
    def test_matching_password(self, store):
        encrypted_password, salt = store.hash("Str0ngP@ss")

        assert store.verify("Str0ngP@ss", encrypted_password, salt) is True

    def test_wrong_password(self, store):
        encrypted_password, salt = store.hash("Str0ngP@ss")

        assert store.verify("wrong", encrypted_password, salt) is False

    def test_empty_inputs_never_match(self, store):
        encrypted_password, salt = store.hash("Str0ngP@ss")

        assert store.verify("", encrypted_password, salt) is False
        assert store.verify("Str0ngP@ss", "", salt) is False
        assert store.verify("Str0ngP@ss", encrypted_password, "") is False

    def test_malformed_salt_does_not_raise(self, store):
        encrypted_password, _ = store.hash("Str0ngP@ss")

        assert store.verify("Str0ngP@ss", encrypted_password, "not-a-salt") is False

    def test_overlong_candidate_does_not_match(self, store):
        encrypted_password, salt = store.hash("Str0ngP@ss")

        assert store.verify("Str0ngP@ss" * 10, encrypted_password, salt) is False
