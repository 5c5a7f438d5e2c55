"""Authentication Pydantic schemas.

Request models validate and normalize incoming data before it reaches the
session authority. Response models never carry password hashes or token
versions. TokenClaims is the fixed claim set every signed token must match.
"""

import re
from datetime import datetime
from enum import StrEnum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictInt, computed_field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _check_username(value: str) -> str:
    value = value.strip()
    if not 3 <= len(value) <= 30:
        raise ValueError("Username must be 3-30 characters long")
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username must contain only letters and digits")
    return value


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email")
    return value


def _check_new_password(value: str) -> str:
    if len(value) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Username = Annotated[str, AfterValidator(_check_username)]
Email = Annotated[str, AfterValidator(_check_email)]
NewPassword = Annotated[str, AfterValidator(_check_new_password)]


# ============================================================================
# Token Schemas
# ============================================================================


class TokenType(StrEnum):
    """Usage context a token is minted for."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """Claims carried by every access and refresh token.

    Unknown claims are rejected so a token of a foreign shape fails
    verification before any business check runs.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    sub: str = Field(..., min_length=1, description="Account ID")
    ver: StrictInt = Field(..., ge=0, description="Account token version at issuance")
    type: TokenType
    iat: StrictInt
    exp: StrictInt
    jti: str = Field(..., min_length=1)


class TokenPair(BaseModel):
    """Freshly issued access and refresh tokens."""

    access_token: str
    refresh_token: str


# ============================================================================
# Account Schemas
# ============================================================================


class ProfileFields(BaseModel):
    """Editable profile details. Omitted fields are left unchanged on update."""

    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    avatar: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=500)

    @field_validator("first_name", "last_name", "avatar", "bio")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class GameStats(BaseModel):
    """Read-only game statistics."""

    games_played: int = 0
    games_won: int = 0
    total_score: int = 0
    level: int = 1

    @computed_field
    @property
    def win_rate(self) -> float:
        if self.games_played == 0:
            return 0.0
        return round(self.games_won / self.games_played * 100, 2)


class AccountResponse(BaseModel):
    """Public view of an account."""

    id: str
    username: str
    email: str
    is_active: bool
    last_login: datetime | None = None
    profile: ProfileFields = Field(default_factory=ProfileFields)
    game_stats: GameStats = Field(default_factory=GameStats)
    created_at: datetime
    updated_at: datetime


class Account(AccountResponse):
    """Account as loaded from the credential store (hash excluded).

    Internal only; convert with to_response() before serializing.
    """

    token_version: int = 0

    def to_response(self) -> AccountResponse:
        return AccountResponse(**self.model_dump(exclude={"token_version"}))


# ============================================================================
# Request Schemas
# ============================================================================


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    username: Username
    email: Email
    password: NewPassword


class LoginRequest(BaseModel):
    """Schema for login by email."""

    email: Email
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Schema for partial profile updates."""

    username: Username | None = None
    profile: ProfileFields | None = None


class ChangePasswordRequest(BaseModel):
    """Schema for changing the password of the signed-in account."""

    current_password: str = Field(..., min_length=1)
    new_password: NewPassword


# ============================================================================
# Response Schemas
# ============================================================================


class MessageResponse(BaseModel):
    message: str


class AuthResponse(BaseModel):
    """Returned by register and login. The refresh token travels as a cookie."""

    message: str
    user: AccountResponse
    access_token: str
    token_type: str = "bearer"


class RefreshResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"


class ProfileResponse(BaseModel):
    user: AccountResponse


class ProfileUpdateResponse(BaseModel):
    message: str
    user: AccountResponse
