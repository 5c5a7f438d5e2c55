"""Authentication decorators for protected endpoints.

This module provides the auth gate:
- _authenticate_request() - shared request authentication logic
- @auth_required - Requires a valid, current access token

Every protected endpoint goes through _authenticate_request(); nothing else
checks access tokens.
"""

import logging
from functools import wraps

from flask import g, request

from ..db import get_core
from ..exceptions import AuthenticationError, InvalidTokenError, TokenExpiredError
from .schemas import TokenType
from .token import get_token_verifier

logger = logging.getLogger(__name__)


# ============================================================================
# Shared Authentication Logic
# ============================================================================


def _extract_bearer_token(auth_header: str) -> str:
    """Return the token from an exact ``Bearer <token>`` header value.

    Raises:
        InvalidTokenError: For any other header shape
    """
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise InvalidTokenError(
            "Invalid authorization header format",
            {"code": "INVALID_AUTH_HEADER", "expected": "Authorization: Bearer <token>"}
        )
    return parts[1]


def _authenticate_request():
    """
    Shared authentication logic for requests.

    Steps:
    1. Extract the bearer token from the Authorization header
    2. Verify signature and expiry (TOKEN_EXPIRED vs INVALID_TOKEN)
    3. Require an access token (refresh tokens are rejected)
    4. Load the account; it must exist and be active
    5. Require the token's version to match the account's current version

    Stores authenticated state in flask.g:
    - g.account: Account model (no password hash)
    - g.account_id: Account ID
    - g.access_token: Raw token string
    - g.token_claims: Verified TokenClaims

    Raises:
        AuthenticationError: Missing header, unavailable account, or
            invalidated token (TOKEN_INVALIDATED)
        TokenExpiredError: Access token expired (TOKEN_EXPIRED)
        InvalidTokenError: Malformed header, bad token, or wrong token type
    """
    auth_header = request.headers.get("Authorization")
    if auth_header is None:
        logger.warning("Unauthenticated request to protected endpoint")
        raise AuthenticationError(
            "Access token required",
            {"code": "MISSING_AUTH", "expected": "Authorization: Bearer <token>"}
        )

    token_str = _extract_bearer_token(auth_header)

    try:
        claims = get_token_verifier().verify(token_str)
    except TokenExpiredError:
        logger.info("Access token expired")
        raise TokenExpiredError("Access token expired", {"code": "TOKEN_EXPIRED"})
    except InvalidTokenError:
        logger.warning("Invalid access token presented")
        raise

    if claims.type != TokenType.ACCESS:
        logger.warning(f"{claims.type} token used as access token for account {claims.sub}")
        raise InvalidTokenError("Invalid token type", {"code": "INVALID_TOKEN_TYPE"})

    core = get_core()
    account = core.account.find_by_id(claims.sub)
    if account is None:
        logger.warning(f"Token is valid but account not found: {claims.sub}")
        raise AuthenticationError(
            "Token is valid but user not found", {"code": "ACCOUNT_UNAVAILABLE"}
        )
    if not account.is_active:
        logger.warning(f"Token presented for deactivated account: {account.id}")
        raise AuthenticationError(
            "User account is deactivated", {"code": "ACCOUNT_UNAVAILABLE"}
        )

    if claims.ver != account.token_version:
        logger.warning(
            f"Invalidated token (version {claims.ver}, current {account.token_version}) "
            f"for account {account.id}"
        )
        raise AuthenticationError(
            "Token has been invalidated", {"code": "TOKEN_INVALIDATED"}
        )

    g.account = account
    g.account_id = account.id
    g.access_token = token_str
    g.token_claims = claims
    logger.debug(f"Authenticated account {account.username}")


# ============================================================================
# Auth Required Decorator
# ============================================================================


def auth_required(f):
    """
    Decorator to require a valid access token for endpoint access.

    Example:
    ```python
    @auth_bp.get("/auth/profile")
    @auth_required
    def get_profile():
        account = g.account
        ...
    ```
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return wrapper
