"""Password hashing and verification using bcrypt.

Digests embed their own salt and work factor, so verification needs nothing
but the digest. hash_password() produces a different digest on every call for
the same input.
"""

import logging
from functools import lru_cache

import bcrypt

from ..config import settings
from ..exceptions import HashingError

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int | None = None) -> str:
    """
    Hash a password with a fresh random salt.

    Args:
        password: Plaintext password
        rounds: bcrypt work factor (defaults to settings.bcrypt_work_factor)

    Returns:
        bcrypt digest as a 60-character string

    Raises:
        HashingError: If salt generation or hashing fails
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_work_factor)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    except (ValueError, TypeError, OSError) as e:
        logger.error(f"Password hashing failed: {e.__class__.__name__}")
        raise HashingError("Failed to hash password") from e
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a password against a stored digest.

    Comparison is constant-time. A mismatch or an unreadable digest returns
    False rather than raising.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-timing")


def burn_verification(password: str) -> None:
    """Spend one verification's worth of time when no account matched.

    Keeps "unknown email" and "wrong password" indistinguishable by latency.
    """
    verify_password(password, _dummy_hash())
