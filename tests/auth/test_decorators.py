"""Tests for the @auth_required decorator.

Every protected endpoint goes through the same gate, so these tests drive it
through a dedicated test route and check each rejection code.
"""

from datetime import timedelta

import pytest
from flask import Blueprint, g, jsonify

from gamecard_core.auth import decorators
from gamecard_core.auth.token import TokenIssuer, get_token_issuer
from gamecard_core.config import settings
from gamecard_core.db import get_core
from gamecard_core.exceptions import InvalidTokenError
from gamecard_core.main import app


# Register test route globally (before any requests)
test_auth_bp = Blueprint("auth_required_test_routes", __name__)


@test_auth_bp.get("/test/whoami")
@decorators.auth_required
def whoami():
    return jsonify({
        "account_id": g.account_id,
        "username": g.account.username,
        "token_version": g.token_claims.ver,
        "has_token": bool(g.access_token),
    }), 200


app.register_blueprint(test_auth_bp)


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _error(response) -> dict:
    assert response.status_code == 401
    return response.get_json()["error"]


class TestExtractBearerToken:
    """Tests for Authorization header parsing."""

    def test_valid_header(self):
        assert decorators._extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize(
        "header",
        ["", "Bearer", "Bearer ", "bearer abc", "Token abc", "Bearer a b", "abc"],
    )
    def test_malformed_headers(self, header):
        with pytest.raises(InvalidTokenError) as exc_info:
            decorators._extract_bearer_token(header)
        assert exc_info.value.code == "INVALID_AUTH_HEADER"


class TestAuthRequiredDecorator:
    """Tests for @auth_required through a protected route."""

    def test_allows_valid_access_token(self, registered_client):
        client, user, headers = registered_client

        response = client.get("/test/whoami", headers=headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["account_id"] == user["id"]
        assert data["username"] == "alice"
        assert data["token_version"] == 0
        assert data["has_token"] is True

    def test_rejects_missing_auth(self, client):
        error = _error(client.get("/test/whoami"))

        assert error["type"] == "AuthenticationError"
        assert error["details"]["code"] == "MISSING_AUTH"

    def test_rejects_malformed_header(self, registered_client):
        client, _, headers = registered_client
        token = headers["Authorization"].split(" ")[1]

        error = _error(client.get("/test/whoami", headers={"Authorization": f"Token {token}"}))

        assert error["details"]["code"] == "INVALID_AUTH_HEADER"

    def test_rejects_garbage_token(self, client):
        error = _error(client.get("/test/whoami", headers=_bearer("invalid.token.here")))

        assert error["kind"] == "invalid"
        assert error["details"]["code"] == "INVALID_TOKEN"

    def test_rejects_expired_token(self, registered_client):
        client, user, _ = registered_client
        issuer = TokenIssuer(settings.jwt_secret_key, access_ttl=timedelta(seconds=-60))
        expired = issuer.issue_pair(user["id"], 0).access_token

        error = _error(client.get("/test/whoami", headers=_bearer(expired)))

        assert error["type"] == "TokenExpiredError"
        assert error["kind"] == "expired"
        assert error["details"]["code"] == "TOKEN_EXPIRED"

    def test_rejects_refresh_token(self, registered_client):
        client, user, _ = registered_client
        refresh_token = get_token_issuer().issue_pair(user["id"], 0).refresh_token

        error = _error(client.get("/test/whoami", headers=_bearer(refresh_token)))

        assert error["details"]["code"] == "INVALID_TOKEN_TYPE"

    def test_rejects_unknown_account(self, client):
        token = get_token_issuer().issue_pair("no-such-account", 0).access_token

        error = _error(client.get("/test/whoami", headers=_bearer(token)))

        assert error["details"]["code"] == "ACCOUNT_UNAVAILABLE"

    def test_rejects_deactivated_account(self, registered_client):
        client, user, headers = registered_client
        with get_core(atomic=True) as core:
            core.account.set_active(user["id"], False)

        error = _error(client.get("/test/whoami", headers=headers))

        assert error["details"]["code"] == "ACCOUNT_UNAVAILABLE"

    def test_rejects_stale_version(self, registered_client):
        """A token minted before the version was bumped is invalidated."""
        client, user, headers = registered_client
        with get_core(atomic=True) as core:
            core.account.bump_token_version(user["id"])

        error = _error(client.get("/test/whoami", headers=headers))

        assert error["kind"] == "unauthorized"
        assert error["details"]["code"] == "TOKEN_INVALIDATED"

    def test_rejects_future_version(self, registered_client):
        client, user, _ = registered_client
        token = get_token_issuer().issue_pair(user["id"], 5).access_token

        error = _error(client.get("/test/whoami", headers=_bearer(token)))

        assert error["details"]["code"] == "TOKEN_INVALIDATED"

    def test_token_signed_with_other_secret(self, registered_client):
        client, user, _ = registered_client
        token = TokenIssuer("a-completely-different-secret-value!").issue_pair(user["id"], 0).access_token

        error = _error(client.get("/test/whoami", headers=_bearer(token)))

        assert error["details"]["code"] == "INVALID_TOKEN"
