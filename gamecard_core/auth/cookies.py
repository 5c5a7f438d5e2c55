"""Refresh token cookie transport.

The refresh token is only ever sent as an HTTP-only, SameSite=Strict cookie
scoped to the auth routes. Access tokens are never stored in cookies.
"""

from datetime import timedelta

from flask import Request, Response

from ..config import settings


def get_refresh_cookie(request: Request) -> str | None:
    return request.cookies.get(settings.refresh_cookie_name)


def set_refresh_cookie(response: Response, refresh_token: str) -> Response:
    """Attach the refresh token cookie to a response."""
    response.set_cookie(
        settings.refresh_cookie_name,
        refresh_token,
        max_age=int(timedelta(days=settings.refresh_token_expiry_days).total_seconds()),
        path=settings.refresh_cookie_path,
        secure=settings.is_production,
        httponly=True,
        samesite="Strict",
    )
    return response


def clear_refresh_cookie(response: Response) -> Response:
    """Expire the refresh token cookie on the client."""
    response.delete_cookie(
        settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        secure=settings.is_production,
        httponly=True,
        samesite="Strict",
    )
    return response
