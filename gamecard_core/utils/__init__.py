"""Utility functions for GameCard Core.

Import convention: use module-level imports for clarity.

    from ..utils import isodatetime, uid
    timestamp = isodatetime.now()
    account_id = uid.generate_uuid()
"""

from . import isodatetime, uid

__all__ = ["isodatetime", "uid"]
