"""Random identifier generation.

This module centralizes all UUID generation. This is the ONLY module that
should import uuid4. All other code should use uid.generate_uuid() or
uid.generate_token_id().
"""

from uuid import uuid4


def generate_uuid() -> str:
    """Generate a random UUID v4 as a string (account IDs)."""
    return str(uuid4())


def generate_token_id() -> str:
    """Generate a compact random ID for the JWT ``jti`` claim."""
    return uuid4().hex
