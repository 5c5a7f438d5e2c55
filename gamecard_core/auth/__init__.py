"""Authentication module for GameCard Core.

This module provides the authentication and session-lifecycle core:
- Schema validation for auth operations (schemas)
- bcrypt password hashing and verification (passwords)
- JWT access/refresh token issuing and verification (token)
- Session authority: register, login, refresh, logout, profile (service)
- Auth gate for protected endpoints (decorators)

Auth endpoints (under settings.api_prefix, default /api):
- POST /auth/register - Create account, return access token + refresh cookie
- POST /auth/login - Authenticate by email and password
- POST /auth/refresh - Rotate tokens using the refresh cookie
- POST /auth/logout - Invalidate tokens and clear refresh cookie
- POST /auth/logout-all - Invalidate tokens on every device
- GET /auth/profile - Get current account
- PUT /auth/profile - Update username / profile
- PUT /auth/change-password - Change password
"""

from . import passwords, schemas, token

__all__ = ["passwords", "schemas", "token"]
