"""Authentication API endpoints for GameCard Core.

These endpoints handle the account session lifecycle and return JSON:
- POST /auth/register        - Create account, issue tokens
- POST /auth/login           - Authenticate by email/password, issue tokens
- POST /auth/refresh         - Rotate tokens using the refresh cookie
- POST /auth/logout          - Invalidate tokens, clear refresh cookie
- POST /auth/logout-all      - Same as logout, for all devices
- GET  /auth/profile         - Current account profile
- PUT  /auth/profile         - Update username / profile fields
- PUT  /auth/change-password - Change password (re-verifies current)

The blueprint is registered under settings.api_prefix (default /api).
Access tokens are returned in the JSON body; refresh tokens only ever travel
in the HTTP-only refresh cookie.
"""

import logging

from flask import Blueprint, after_this_request, g, jsonify, request

from ..api.validation import validate_request
from ..db import get_core
from ..config import settings
from ..exceptions import AuthenticationError
from ..limiter import limiter
from . import cookies
from .decorators import auth_required
from .schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    RefreshResponse,
    RegisterRequest,
)
from .service import get_session_authority

logger = logging.getLogger(__name__)


# Create blueprint
auth_bp = Blueprint("auth", __name__)


def _auth_response(message: str, account, tokens, status: int):
    """Build a register/login response with the refresh cookie attached."""
    response = jsonify(
        AuthResponse(
            message=message,
            user=account.to_response(),
            access_token=tokens.access_token,
        ).model_dump(mode="json")
    )
    cookies.set_refresh_cookie(response, tokens.refresh_token)
    return response, status


# ============================================================================
# Registration and Login
# ============================================================================


@auth_bp.post("/auth/register")
@limiter.limit(
    lambda: settings.register_rate_limit,
    error_message="Too many authentication attempts, please try again later."
)
@validate_request
def register(data: RegisterRequest):
    """
    Register a new account.

    Example request:
    ```json
    {
        "username": "alice",
        "email": "alice@x.com",
        "password": "Secret123"
    }
    ```

    Returns:
        201: AuthResponse, refresh cookie set
        400: Validation error
        409: Username or email already taken
        429: More than settings.register_rate_limit from this client
    """
    with get_core(atomic=True) as core:
        account, tokens = get_session_authority().register(core, data)

    return _auth_response("User registered successfully", account, tokens, 201)


@auth_bp.post("/auth/login")
@limiter.limit(
    lambda: settings.login_rate_limit,
    error_message="Too many login attempts, please try again later."
)
@validate_request
def login(data: LoginRequest):
    """
    Authenticate by email and password.

    Example response:
    ```json
    {
        "message": "Login successful",
        "user": {"id": "...", "username": "alice", "email": "alice@x.com", ...},
        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
        "token_type": "bearer"
    }
    ```

    Returns:
        200: AuthResponse, refresh cookie set
        401: Invalid email or password (same response for unknown email)
        429: More than settings.login_rate_limit from this client
    """
    with get_core(atomic=True) as core:
        account, tokens = get_session_authority().login(core, data)

    return _auth_response("Login successful", account, tokens, 200)


# ============================================================================
# Token Refresh
# ============================================================================


@auth_bp.post("/auth/refresh")
def refresh():
    """
    Exchange the refresh cookie for a new access token.

    The presented refresh token is single-use: a new one replaces it in the
    cookie. On any failure the cookie is cleared so the client stops retrying.

    Returns:
        200: RefreshResponse, refresh cookie rotated
        401: Missing/invalid/invalidated token, or REFRESH_EXPIRED
    """
    refresh_token = cookies.get_refresh_cookie(request)
    try:
        with get_core(atomic=True) as core:
            _account, tokens = get_session_authority().refresh(core, refresh_token)
    except AuthenticationError:
        after_this_request(cookies.clear_refresh_cookie)
        raise

    response = jsonify(
        RefreshResponse(
            message="Token refreshed successfully",
            access_token=tokens.access_token,
        ).model_dump(mode="json")
    )
    cookies.set_refresh_cookie(response, tokens.refresh_token)
    return response, 200


# ============================================================================
# Logout
# ============================================================================


@auth_bp.post("/auth/logout")
@auth_required
def logout():
    """
    Log out: invalidate outstanding tokens and clear the refresh cookie.

    Returns:
        200: {"message": "Logged out successfully"}
        401: Not authenticated
    """
    with get_core(atomic=True) as core:
        get_session_authority().logout(core, g.account)

    response = jsonify(MessageResponse(message="Logged out successfully").model_dump())
    cookies.clear_refresh_cookie(response)
    return response, 200


@auth_bp.post("/auth/logout-all")
@auth_required
def logout_all():
    """
    Log out from all devices.

    Returns:
        200: {"message": "Logged out from all devices successfully"}
        401: Not authenticated
    """
    with get_core(atomic=True) as core:
        get_session_authority().logout_all_devices(core, g.account)

    response = jsonify(
        MessageResponse(message="Logged out from all devices successfully").model_dump()
    )
    cookies.clear_refresh_cookie(response)
    return response, 200


# ============================================================================
# Profile
# ============================================================================


@auth_bp.get("/auth/profile")
@auth_required
def get_profile():
    """
    Get the authenticated account's profile.

    Returns:
        200: {"user": AccountResponse}
        401: Not authenticated
    """
    account = get_session_authority().get_profile(g.account)
    return jsonify(ProfileResponse(user=account.to_response()).model_dump(mode="json")), 200


@auth_bp.put("/auth/profile")
@auth_required
@validate_request
def update_profile(data: ProfileUpdate):
    """
    Update username and/or profile fields.

    Example request:
    ```json
    {
        "username": "alice2",
        "profile": {"first_name": "Alice", "bio": "Collector"}
    }
    ```

    Returns:
        200: ProfileUpdateResponse
        400: Validation error
        401: Not authenticated
        409: Username taken
    """
    with get_core(atomic=True) as core:
        account = get_session_authority().update_profile(core, g.account, data)

    return jsonify(
        ProfileUpdateResponse(
            message="Profile updated successfully",
            user=account.to_response(),
        ).model_dump(mode="json")
    ), 200


@auth_bp.put("/auth/change-password")
@auth_required
@validate_request
def change_password(data: ChangePasswordRequest):
    """
    Change the password after re-verifying the current one.

    Returns:
        200: {"message": "Password changed successfully"}
        400: Validation error, or current password incorrect
        401: Not authenticated
    """
    with get_core(atomic=True) as core:
        get_session_authority().change_password(core, g.account, data)

    return jsonify(MessageResponse(message="Password changed successfully").model_dump()), 200
