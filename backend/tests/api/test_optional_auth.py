"""
Tests for the optional authentication dependency.

Absence of credentials means an anonymous caller; a token that is present
but bad is still rejected.
"""

from typing import Optional

import pytest
from fastapi import Depends, Request
from fastapi.testclient import TestClient

from api.app import create_app
from api.middleware.auth import OptionalAuth, get_optional_user
from shared.models import AuthenticatedUser


USER_ID = "0b6f4f1e-7a8c-4d2b-9e3f-5a1c2d3e4f50"


@pytest.fixture
def optional_client(container):
    app = create_app()

    @app.get("/public")
    async def public_route(
        request: Request,
        user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    ):
        attached = getattr(request.state, "user", None)
        return {
            "user_id": user.id if user else None,
            "attached": attached.id if attached else None,
        }

    @app.get("/public-alias")
    async def public_alias(user: Optional[AuthenticatedUser] = OptionalAuth):
        return {"user_id": user.id if user else None}

    return TestClient(app)


class TestOptionalAuth:
    def test_no_header_is_anonymous(self, optional_client):
        response = optional_client.get("/public")

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "attached": None}

    def test_other_scheme_is_anonymous(self, optional_client):
        response = optional_client.get("/public", headers={"Authorization": "Basic x"})

        assert response.status_code == 200
        assert response.json()["user_id"] is None

    def test_garbage_bearer_token_is_rejected(self, optional_client):
        response = optional_client.get("/public", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "INVALID_TOKEN"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_expired_token_is_rejected(self, optional_client, container, clock):
        token = container.tokens.issue(USER_ID, "jane@example.com").token
        clock.advance(hours=25)

        response = optional_client.get("/public", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "TOKEN_EXPIRED"

    def test_valid_token_yields_identity(self, optional_client, container):
        token = container.tokens.issue(USER_ID, "jane@example.com").token

        response = optional_client.get("/public", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": USER_ID, "attached": USER_ID}

    def test_alias_behaves_the_same(self, optional_client, container):
        token = container.tokens.issue(USER_ID, "jane@example.com").token

        anonymous = optional_client.get("/public-alias")
        identified = optional_client.get(
            "/public-alias", headers={"Authorization": f"Bearer {token}"}
        )

        assert anonymous.json() == {"user_id": None}
        assert identified.json() == {"user_id": USER_ID}
