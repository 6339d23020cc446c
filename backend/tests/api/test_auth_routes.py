"""
Tests for the /api/auth endpoints.

Requests go through the full app wired to the in-memory store. Tokens are
issued and checked against the shared fake clock, so expiry is exercised by
moving the clock rather than by sleeping.
"""

import pytest


PASSWORD = "Password123!"


def register(client, email="jane@example.com", password=PASSWORD):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "first_name": "Jane", "last_name": "Doe"},
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def session(client):
    """A registered user: (user id, token)."""
    data = register(client).json()["data"]
    return data["user"]["id"], data["token"]


class TestRegister:
    def test_register_returns_session(self, client):
        response = register(client, email="  Jane@Example.COM ")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Registration successful"
        assert body["data"]["token_type"] == "Bearer"
        assert body["data"]["expires_in"] == 24 * 3600
        user = body["data"]["user"]
        assert user["email"] == "jane@example.com"
        assert user["full_name"] == "Jane Doe"
        assert user["is_active"] is True
        assert "password" not in user
        assert "password_hash" not in user

    def test_duplicate_email_conflicts(self, client):
        register(client)
        response = register(client, email="JANE@example.com")

        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "EMAIL_ALREADY_EXISTS"

    def test_weak_password_rejected(self, client):
        response = register(client, password="short")

        assert response.status_code == 400
        fields = [e["field"] for e in response.json()["errors"]]
        assert "password" in fields

    def test_unknown_fields_rejected(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "jane@example.com",
                "password": PASSWORD,
                "first_name": "Jane",
                "last_name": "Doe",
                "is_admin": True,
            },
        )
        assert response.status_code == 400


class TestLogin:
    def test_login(self, client, session):
        response = client.post(
            "/api/auth/login", json={"email": "jane@example.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == session[0]
        assert data["user"]["last_login_at"] is not None

    @pytest.mark.parametrize(
        "email,password",
        [("jane@example.com", "Wrong123!"), ("nobody@example.com", PASSWORD)],
    )
    def test_bad_credentials_are_indistinguishable(self, client, session, email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "Invalid email or password"
        assert body["errors"][0]["code"] == "INVALID_CREDENTIALS"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_deactivated_account(self, client, session):
        user_id, token = session
        client.delete(f"/api/users/{user_id}", headers=bearer(token))

        response = client.post(
            "/api/auth/login", json={"email": "jane@example.com", "password": PASSWORD}
        )
        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "ACCOUNT_DEACTIVATED"


class TestTokenChecks:
    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "NO_TOKEN"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers=bearer("not.a.token"))

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "INVALID_TOKEN"

    def test_wrong_signature(self, client, token_factory):
        forged = token_factory(secret="another-secret-key-that-is-long-enough-000")
        response = client.get("/api/auth/me", headers=bearer(forged))

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, session, clock):
        _, token = session
        clock.advance(hours=24)

        response = client.get("/api/auth/me", headers=bearer(token))
        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "TOKEN_EXPIRED"

    def test_me(self, client, session):
        user_id, token = session
        response = client.get("/api/auth/me", headers=bearer(token))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] == user_id
        assert data["email"] == "jane@example.com"
        assert data["token_expires_at"] is not None

    def test_token_info(self, client, session):
        user_id, token = session
        data = client.get("/api/auth/token-info", headers=bearer(token)).json()["data"]

        assert data["user_id"] == user_id
        assert data["is_valid"] is True
        assert data["is_expired"] is False
        assert data["exp"] - data["iat"] == 24 * 3600

    def test_token_info_for_expired_token(self, client, session, clock):
        """Introspection still answers for tokens that no longer authenticate."""
        _, token = session
        clock.advance(hours=25)

        response = client.get("/api/auth/token-info", headers=bearer(token))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_valid"] is False
        assert data["is_expired"] is True


class TestRefreshAndLogout:
    def test_refresh(self, client, session, clock):
        user_id, token = session
        clock.advance(hours=1)

        response = client.post("/api/auth/refresh-token", headers=bearer(token))

        assert response.status_code == 200
        new_token = response.json()["data"]["token"]
        assert new_token != token
        me = client.get("/api/auth/me", headers=bearer(new_token)).json()["data"]
        assert me["user_id"] == user_id

    def test_refresh_expired_token_refused(self, client, session, clock):
        _, token = session
        clock.advance(hours=25)

        response = client.post("/api/auth/refresh-token", headers=bearer(token))
        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "TOKEN_EXPIRED"

    def test_refresh_for_deactivated_user(self, client, session):
        user_id, token = session
        client.delete(f"/api/users/{user_id}", headers=bearer(token))

        response = client.post("/api/auth/refresh-token", headers=bearer(token))
        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "ACCOUNT_DEACTIVATED"

    def test_logout_keeps_token_usable(self, client, session):
        _, token = session

        response = client.post("/api/auth/logout", headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["message"] == "Logout successful"
        assert client.get("/api/auth/me", headers=bearer(token)).status_code == 200

    def test_logout_requires_token(self, client):
        assert client.post("/api/auth/logout").status_code == 401


class TestChangePassword:
    def test_change_password(self, client, session):
        _, token = session
        response = client.put(
            "/api/auth/change-password",
            headers=bearer(token),
            json={
                "current_password": PASSWORD,
                "new_password": "NewSecret456",
                "confirm_password": "NewSecret456",
            },
        )

        assert response.status_code == 200
        old = client.post("/api/auth/login", json={"email": "jane@example.com", "password": PASSWORD})
        new = client.post(
            "/api/auth/login", json={"email": "jane@example.com", "password": "NewSecret456"}
        )
        assert old.status_code == 401
        assert new.status_code == 200

    def test_wrong_current_password(self, client, session):
        _, token = session
        response = client.put(
            "/api/auth/change-password",
            headers=bearer(token),
            json={
                "current_password": "Nope12345",
                "new_password": "NewSecret456",
                "confirm_password": "NewSecret456",
            },
        )
        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "INVALID_CURRENT_PASSWORD"

    def test_confirmation_mismatch(self, client, session):
        _, token = session
        response = client.put(
            "/api/auth/change-password",
            headers=bearer(token),
            json={
                "current_password": PASSWORD,
                "new_password": "NewSecret456",
                "confirm_password": "NewSecret789",
            },
        )
        assert response.status_code == 400


class TestValidatePassword:
    def test_strong_password(self, client):
        response = client.post("/api/auth/validate-password", json={"password": "Str0ng!Pass"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_valid"] is True
        assert data["score"] == 5
        assert data["suggestions"] == ["Great! You're using special characters"]

    def test_weak_pattern(self, client):
        data = client.post(
            "/api/auth/validate-password", json={"password": "password123"}
        ).json()["data"]
        assert data["is_valid"] is False
        assert len(data["suggestions"]) <= 3

    def test_needs_no_token(self, client):
        response = client.post("/api/auth/validate-password", json={"password": "abc"})
        assert response.status_code == 200
