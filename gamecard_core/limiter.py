"""Per-client rate limiting for the auth routes.

Limits are keyed by remote address and configured in settings
(register_rate_limit, login_rate_limit). main.py binds the limiter to the
app and renders breaches as RateLimitError responses.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
    headers_enabled=True,
)
