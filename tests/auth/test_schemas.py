"""
Tests for Authentication Pydantic schemas (API validation).

Tests verify that:
- Registration enforces username, email and password rules
- Emails are normalized and usernames trimmed
- Profile fields respect their length limits
- Token claims reject unknown or mistyped claims
- Response models never expose the token version
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from gamecard_core.auth.schemas import (
    Account,
    AuthResponse,
    ChangePasswordRequest,
    GameStats,
    LoginRequest,
    ProfileFields,
    ProfileUpdate,
    RegisterRequest,
    TokenClaims,
    TokenType,
)


def _register(**overrides):
    data = {"username": "alice", "email": "alice@x.com", "password": "Secret123"}
    data.update(overrides)
    return RegisterRequest(**data)


# ============================================================================
# Request Schemas Tests
# ============================================================================


class TestRegisterRequest:
    """Tests for RegisterRequest schema."""

    def test_valid(self):
        data = _register()
        assert data.username == "alice"
        assert data.email == "alice@x.com"

    def test_email_normalized(self):
        assert _register(email="  Alice@X.COM ").email == "alice@x.com"

    def test_username_trimmed_case_preserved(self):
        assert _register(username="  AliceW ").username == "AliceW"

    @pytest.mark.parametrize("username", ["al", "a" * 31, "alice_w", "alice w", "ålice", ""])
    def test_invalid_usernames(self, username):
        with pytest.raises(ValidationError):
            _register(username=username)

    @pytest.mark.parametrize("username", ["abc", "a" * 30, "Player1"])
    def test_boundary_usernames(self, username):
        assert _register(username=username).username == username

    @pytest.mark.parametrize("email", ["alice", "alice@", "@x.com", "alice@x", "al ice@x.com"])
    def test_invalid_emails(self, email):
        with pytest.raises(ValidationError):
            _register(email=email)

    def test_password_too_short(self):
        with pytest.raises(ValidationError) as exc_info:
            _register(password="12345")
        assert "at least 6" in str(exc_info.value)

    def test_password_minimum_length(self):
        assert _register(password="123456").password == "123456"

    def test_password_over_72_bytes(self):
        """Multi-byte characters count by their encoded length."""
        assert _register(password="a" * 72).password == "a" * 72
        with pytest.raises(ValidationError):
            _register(password="a" * 73)
        with pytest.raises(ValidationError):
            _register(password="é" * 37)

    def test_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest()
        fields = {err["loc"][0] for err in exc_info.value.errors()}
        assert fields == {"username", "email", "password"}


class TestLoginRequest:
    """Tests for LoginRequest schema."""

    def test_valid(self):
        data = LoginRequest(email="ALICE@x.com", password="x")
        assert data.email == "alice@x.com"

    def test_login_password_has_no_length_rule(self):
        """Any non-empty password may be tried at login."""
        assert LoginRequest(email="alice@x.com", password="1").password == "1"

    def test_empty_password(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="alice@x.com", password="")


class TestProfileUpdate:
    """Tests for ProfileUpdate and ProfileFields."""

    def test_all_optional(self):
        data = ProfileUpdate()
        assert data.username is None
        assert data.profile is None

    def test_profile_fields_tracked_as_set(self):
        data = ProfileUpdate(profile={"bio": "  Collector  "})
        assert data.profile.model_dump(exclude_unset=True) == {"bio": "Collector"}

    def test_username_validated(self):
        with pytest.raises(ValidationError):
            ProfileUpdate(username="a!")

    @pytest.mark.parametrize(
        "field, limit",
        [("first_name", 50), ("last_name", 50), ("avatar", 500), ("bio", 500)],
    )
    def test_length_limits(self, field, limit):
        assert getattr(ProfileFields(**{field: "x" * limit}), field) == "x" * limit
        with pytest.raises(ValidationError):
            ProfileFields(**{field: "x" * (limit + 1)})


class TestChangePasswordRequest:
    """Tests for ChangePasswordRequest schema."""

    def test_valid(self):
        data = ChangePasswordRequest(current_password="old", new_password="NewSecret1")
        assert data.new_password == "NewSecret1"

    def test_new_password_rules_apply(self):
        with pytest.raises(ValidationError):
            ChangePasswordRequest(current_password="old", new_password="short")

    def test_current_password_required(self):
        with pytest.raises(ValidationError):
            ChangePasswordRequest(current_password="", new_password="NewSecret1")


# ============================================================================
# Token Schemas Tests
# ============================================================================


class TestTokenClaims:
    """Tests for TokenClaims schema."""

    def _claims(self, **overrides):
        data = {"sub": "id-1", "ver": 0, "type": "access", "iat": 1, "exp": 2, "jti": "j"}
        data.update(overrides)
        return TokenClaims(**data)

    def test_valid(self):
        claims = self._claims(type="refresh")
        assert claims.type == TokenType.REFRESH

    def test_extra_claim_forbidden(self):
        with pytest.raises(ValidationError):
            self._claims(username="alice")

    def test_version_must_be_non_negative_int(self):
        with pytest.raises(ValidationError):
            self._claims(ver=-1)
        with pytest.raises(ValidationError):
            self._claims(ver="1")
        with pytest.raises(ValidationError):
            self._claims(ver=True)

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            self._claims(type="admin")

    def test_frozen(self):
        claims = self._claims()
        with pytest.raises(ValidationError):
            claims.ver = 5

    def test_json_dump(self):
        assert self._claims().model_dump(mode="json")["type"] == "access"


# ============================================================================
# Response Schemas Tests
# ============================================================================


class TestAccountSchemas:
    """Tests for Account, GameStats and response models."""

    def _account(self, **overrides):
        data = {
            "id": "id-1",
            "username": "alice",
            "email": "alice@x.com",
            "is_active": True,
            "token_version": 4,
            "created_at": datetime(2026, 1, 1, 12, 0, 0),
            "updated_at": datetime(2026, 1, 1, 12, 0, 0),
        }
        data.update(overrides)
        return Account(**data)

    def test_to_response_drops_token_version(self):
        response = self._account().to_response()
        assert "token_version" not in response.model_dump()
        assert response.username == "alice"

    def test_defaults(self):
        account = self._account()
        assert account.profile == ProfileFields()
        assert account.game_stats.level == 1
        assert account.last_login is None

    def test_win_rate(self):
        assert GameStats(games_played=3, games_won=1).win_rate == 33.33
        assert GameStats(games_played=4, games_won=4).win_rate == 100.0
        assert GameStats().win_rate == 0.0

    def test_win_rate_serialized(self):
        dumped = GameStats(games_played=2, games_won=1).model_dump()
        assert dumped["win_rate"] == 50.0

    def test_auth_response(self):
        response = AuthResponse(
            message="Login successful",
            user=self._account().to_response(),
            access_token="token",
        )
        data = response.model_dump(mode="json")

        assert data["token_type"] == "bearer"
        assert data["user"]["created_at"].startswith("2026-01-01T12:00:00")
        assert "refresh_token" not in data
        assert "password_hash" not in data["user"]
