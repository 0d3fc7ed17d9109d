"""HTTP tests for the /api/v1/auth routes (in-memory repositories)."""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from api import app
from inkwell.auth.dependencies import init_auth_services

PASSWORD = "Str0ngP@ss"
WINDOWS_UA = "Mozilla/5.0 (Windows NT 10.0)"
IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)


@pytest.fixture
def client(user_repository, auth_repository, test_settings, fake_clock):
    init_auth_services(
        user_repository=user_repository,
        auth_repository=auth_repository,
        settings=test_settings,
        clock=fake_clock,
    )
    return TestClient(app)


def register(client, email="alice@example.com", password=PASSWORD, user_agent=WINDOWS_UA):
    return client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "name": "Alice"},
        headers={"User-Agent": user_agent},
    )


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


# ─────────────────────────────────────────────────────────────────
# Registration and login
# ─────────────────────────────────────────────────────────────────


class TestRegister:
    def test_creates_account_and_sets_cookie(self, client):
        response = register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "alice@example.com"

        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"inkwell_session={body['data']['sessionToken']};")
        assert "HttpOnly" in cookie
        assert "Max-Age=86400" in cookie

    def test_cookie_resolves_current_user(self, client):
        register(client)

        response = client.get("/api/v1/auth/session")

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "alice@example.com"

    def test_weak_password(self, client):
        response = register(client, password="short")

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "WEAK_PASSWORD"
        assert "Password must be at least 8 characters" in error["errors"]

    def test_duplicate_email(self, client):
        register(client)

        response = register(client)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMAIL_TAKEN"


class TestLogin:
    def test_sets_cookie_and_returns_token(self, client):
        register(client)
        client.cookies.clear()

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": PASSWORD},
            headers={"User-Agent": IPHONE_UA},
        )

        assert response.status_code == 200
        token = response.json()["data"]["sessionToken"]
        assert response.headers["set-cookie"].startswith(f"inkwell_session={token};")

    def test_wrong_password_and_unknown_email_identical(self, client):
        register(client)

        wrong = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": "wrong"},
        )
        unknown = client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": "x"},
        )

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {
            "success": False,
            "error": {"message": "Invalid email or password", "code": "INVALID_CREDENTIALS"},
        }

    def test_storage_failure_is_generic(self, client, auth_repository):
        register(client)

        with patch.object(
            auth_repository, "list_by_user", AsyncMock(side_effect=RuntimeError("db exploded"))
        ):
            response = client.post(
                "/api/v1/auth/login",
                json={"email": "alice@example.com", "password": PASSWORD},
            )

        assert response.status_code == 500
        assert response.json()["error"] == {
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
        }


# ─────────────────────────────────────────────────────────────────
# Current session and logout
# ─────────────────────────────────────────────────────────────────


class TestSession:
    def test_anonymous(self, client):
        response = client.get("/api/v1/auth/session")

        assert response.status_code == 200
        assert response.json()["data"] == {"user": None}

    def test_invalid_token_is_rejected(self, client):
        response = client.get("/api/v1/auth/session", headers=bearer("not-a-token"))

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, fake_clock):
        token = register(client).json()["data"]["sessionToken"]
        client.cookies.clear()
        fake_clock.advance(hours=25)

        response = client.get("/api/v1/auth/session", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


class TestLogout:
    def test_revokes_session_and_clears_cookie(self, client):
        token = register(client).json()["data"]["sessionToken"]

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert 'inkwell_session=""' in response.headers["set-cookie"]

        client.cookies.clear()
        after = client.get("/api/v1/auth/session", headers=bearer(token))
        assert after.status_code == 401
        assert after.json()["error"]["code"] == "SESSION_REVOKED"

    def test_anonymous_logout_succeeds(self, client):
        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert response.json()["success"] is True


# ─────────────────────────────────────────────────────────────────
# Protected routes
# ─────────────────────────────────────────────────────────────────


class TestProtectedRoutes:
    def test_requires_authentication(self, client):
        response = client.get("/api/v1/auth/sessions")

        assert response.status_code == 401
        assert response.json()["error"] == {
            "message": "Authentication required",
            "code": "AUTH_REQUIRED",
        }

    def test_lists_sessions(self, client):
        laptop_token = register(client).json()["data"]["sessionToken"]
        client.cookies.clear()
        client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": PASSWORD},
            headers={"User-Agent": IPHONE_UA},
        )
        client.cookies.clear()

        response = client.get("/api/v1/auth/sessions", headers=bearer(laptop_token))

        assert response.status_code == 200
        sessions = response.json()["data"]["sessions"]
        assert sorted(s["deviceLabel"] for s in sessions) == ["ios-safari", "windows-unknown"]
        current = [s for s in sessions if s["isCurrent"]]
        assert [s["deviceLabel"] for s in current] == ["windows-unknown"]

    def test_revoke_other_device(self, client):
        laptop_token = register(client).json()["data"]["sessionToken"]
        client.cookies.clear()
        phone = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": PASSWORD},
            headers={"User-Agent": IPHONE_UA},
        ).json()["data"]
        client.cookies.clear()

        response = client.delete(
            f"/api/v1/auth/sessions/{phone['sessionId']}", headers=bearer(laptop_token)
        )

        assert response.status_code == 200
        rejected = client.get("/api/v1/auth/session", headers=bearer(phone["sessionToken"]))
        assert rejected.json()["error"]["code"] == "SESSION_REVOKED"

    def test_cannot_revoke_current_session(self, client):
        data = register(client).json()["data"]

        response = client.delete(f"/api/v1/auth/sessions/{data['sessionId']}")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CANNOT_REVOKE_CURRENT"

    def test_change_password_keeps_current_session(self, client):
        laptop_token = register(client).json()["data"]["sessionToken"]
        client.cookies.clear()
        phone_token = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": PASSWORD},
            headers={"User-Agent": IPHONE_UA},
        ).json()["data"]["sessionToken"]
        client.cookies.clear()

        response = client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "N3wPassw0rd!"},
            headers=bearer(laptop_token),
        )

        assert response.status_code == 200
        assert response.json()["data"]["revokedCount"] == 1
        assert client.get("/api/v1/auth/session", headers=bearer(laptop_token)).status_code == 200
        assert client.get("/api/v1/auth/session", headers=bearer(phone_token)).status_code == 401

        relogin = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": "N3wPassw0rd!"},
        )
        assert relogin.status_code == 200


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ok"
