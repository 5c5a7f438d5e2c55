"""Authentication Pydantic schemas for API validation."""

from .auth import (
    Account,
    AccountResponse,
    AuthResponse,
    ChangePasswordRequest,
    GameStats,
    LoginRequest,
    MessageResponse,
    ProfileFields,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    RefreshResponse,
    RegisterRequest,
    TokenClaims,
    TokenPair,
    TokenType,
)

__all__ = [
    "Account",
    "AccountResponse",
    "AuthResponse",
    "ChangePasswordRequest",
    "GameStats",
    "LoginRequest",
    "MessageResponse",
    "ProfileFields",
    "ProfileResponse",
    "ProfileUpdate",
    "ProfileUpdateResponse",
    "RefreshResponse",
    "RegisterRequest",
    "TokenClaims",
    "TokenPair",
    "TokenType",
]
