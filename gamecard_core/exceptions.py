"""Custom exceptions for GameCard Core.

Every exception carries a human-readable message, an optional details dict,
an ErrorKind and the HTTP status the error handler maps it to. Stable client
codes (e.g. TOKEN_EXPIRED, TOKEN_INVALIDATED) travel in details["code"].
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Coarse error categories surfaced to clients."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    INVALID = "invalid"
    EXPIRED = "expired"
    BAD_CREDENTIAL = "bad_credential"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


class GameCardError(Exception):
    """Base exception for all GameCard Core errors."""

    kind = ErrorKind.INTERNAL
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def code(self) -> str | None:
        return self.details.get("code")


class ResourceNotFound(GameCardError):
    """Requested resource does not exist."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ValidationError(GameCardError):
    """Request data failed validation."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class ConflictError(GameCardError):
    """Username or email is already taken."""

    kind = ErrorKind.CONFLICT
    status_code = 409


class RateLimitError(GameCardError):
    """Too many requests from one client within the limit window."""

    kind = ErrorKind.RATE_LIMITED
    status_code = 429


class HashingError(GameCardError):
    """Password hashing failed (e.g. RNG failure)."""


class AuthenticationError(GameCardError):
    """Missing, wrong or invalidated credentials."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = 401


class InvalidTokenError(AuthenticationError):
    """Token signature, structure or type is not acceptable."""

    kind = ErrorKind.INVALID


class TokenExpiredError(AuthenticationError):
    """Token is well-formed but past its expiry."""

    kind = ErrorKind.EXPIRED


class BadCredentialError(GameCardError):
    """Re-entered password did not match (change password)."""

    kind = ErrorKind.BAD_CREDENTIAL
    status_code = 400
