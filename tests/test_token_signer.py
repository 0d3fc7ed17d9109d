"""Unit tests for TokenSigner (session-id JWTs)."""

import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from inkwell.auth.errors import TokenExpiredError, TokenInvalidError
from inkwell.auth.services.token_signer import TokenSigner

SECRET = "unit-test-secret-0123456789abcdef"
ISSUED = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
EXPIRES = ISSUED + timedelta(hours=1)


@pytest.fixture
def signer():
    return TokenSigner(SECRET)


class TestEncodeDecode:
    def test_round_trip_returns_session_id(self, signer):
        token = signer.encode("65f0c0ffee0000000000abcd", EXPIRES, ISSUED)

        assert signer.decode(token, now=ISSUED) == "65f0c0ffee0000000000abcd"

    def test_payload_names_session_not_user(self, signer):
        token = signer.encode("session-1", EXPIRES, ISSUED)

        claims = jwt.get_unverified_claims(token)
        assert claims["sid"] == "session-1"
        assert claims["exp"] == int(EXPIRES.timestamp())
        assert claims["iat"] == int(ISSUED.timestamp())
        assert "user_id" not in claims

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenSigner("")

    def test_repr_hides_secret(self, signer):
        assert SECRET not in repr(signer)


class TestExpiry:
    def test_expired_at_exact_expiry(self, signer):
        token = signer.encode("session-1", EXPIRES, ISSUED)

        with pytest.raises(TokenExpiredError):
            signer.decode(token, now=EXPIRES)

    def test_valid_just_before_expiry(self, signer):
        token = signer.encode("session-1", EXPIRES, ISSUED)

        assert signer.decode(token, now=EXPIRES - timedelta(seconds=1)) == "session-1"

    def test_expired_error_code(self, signer):
        token = signer.encode("session-1", EXPIRES, ISSUED)

        with pytest.raises(TokenExpiredError) as exc_info:
            signer.decode(token, now=EXPIRES + timedelta(days=1))

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "TOKEN_EXPIRED"


class TestInvalid:
    def test_wrong_secret(self, signer):
        token = TokenSigner("another-secret").encode("session-1", EXPIRES, ISSUED)

        with pytest.raises(TokenInvalidError):
            signer.decode(token, now=ISSUED)

    def test_tampered_token(self, signer):
        token = signer.encode("session-1", EXPIRES, ISSUED)
        header, _, signature = token.split(".")
        forged = jwt.encode({"sid": "session-2", "exp": EXPIRES}, "guess")
        tampered = ".".join([header, forged.split(".")[1], signature])

        with pytest.raises(TokenInvalidError):
            signer.decode(tampered, now=ISSUED)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, signer, token):
        with pytest.raises(TokenInvalidError) as exc_info:
            signer.decode(token, now=ISSUED)

        assert exc_info.value.code == "INVALID_TOKEN"

    def test_missing_session_claim(self, signer):
        token = jwt.encode({"exp": EXPIRES}, SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalidError):
            signer.decode(token, now=ISSUED)

    def test_missing_expiry_claim(self, signer):
        token = jwt.encode({"sid": "session-1"}, SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalidError):
            signer.decode(token, now=ISSUED)

    def test_unexpected_algorithm_rejected(self, signer):
        token = jwt.encode({"sid": "session-1", "exp": EXPIRES}, SECRET, algorithm="HS512")

        with pytest.raises(TokenInvalidError):
            signer.decode(token, now=ISSUED)


class TestWallClock:
    def test_recently_expired_token_reports_expiry(self, signer):
        now = datetime.now(timezone.utc)
        token = signer.encode("session-1", now - timedelta(seconds=5), now - timedelta(hours=1))

        with pytest.raises(TokenExpiredError):
            signer.decode(token)

    def test_injected_time_wins_over_wall_clock(self, signer):
        now = datetime.now(timezone.utc)
        token = signer.encode("session-1", now - timedelta(seconds=5), now - timedelta(hours=1))

        assert signer.decode(token, now=now - timedelta(minutes=1)) == "session-1"

    def test_live_token_with_default_clock(self, signer):
        now = datetime.now(timezone.utc)
        token = signer.encode("session-1", now + timedelta(hours=1), now)

        assert signer.decode(token) == "session-1"
