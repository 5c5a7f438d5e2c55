"""Database module for GameCard Core.

This module provides the Core API for credential store operations.
Core encapsulates connection management and exposes account operations.

ARCHITECTURE:
- Core owns its connection (no Flask g.db dependency)
- Connection closes on context exit (atomic=True) or on garbage collection
- Account persistence lives behind core.account; nothing else touches SQL

CONCURRENCY:
Each request gets its own connection. Token-version bumps are single
UPDATE statements, and refresh rotation uses a conditional update
("WHERE token_version = ?") so concurrent refreshes with the same token
cannot both succeed:

    with get_core(atomic=True) as core:
        if not core.account.bump_token_version_if(account_id, expected=3):
            ...  # someone else rotated first
"""

from pathlib import Path
from typing import TYPE_CHECKING
import sqlite3
from ..config import settings

if TYPE_CHECKING:
    from .account import AccountOperations


class Core:
    """
    Database Core with account operations.

    Maintains its own connection and transaction state.

    Connection Lifecycle:
    - atomic=True: Connection commits/rolls back and closes on __exit__
    - atomic=False: Caller commits; connection closes when Core is collected
    """

    def __init__(self, connection: sqlite3.Connection, atomic: bool = False):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
            atomic: If True, Core MUST be used as context manager.
        """
        self._conn = connection
        self._atomic = atomic
        self._account_ops = None

    @property
    def account(self) -> "AccountOperations":
        """Account (credential store) operations.

        Lazy-loaded to avoid circular import issues.
        """
        if self._account_ops is None:
            from .account import AccountOperations
            self._account_ops = AccountOperations(self._conn)
        return self._account_ops

    def commit(self) -> None:
        self._conn.commit()

    def __enter__(self) -> "Core":
        """Enter context manager for atomic transaction.

        Raises:
            RuntimeError: If Core was not created with atomic=True
        """
        if not self._atomic:
            raise RuntimeError(
                "Core must be created with atomic=True for context manager use. "
                "Use: with db.get_core(atomic=True) as core:"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager, committing or rolling back transaction."""
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._conn.close()

    def __del__(self):
        """Close the connection if still open.

        Errors are ignored since the connection may already be closed.
        """
        if hasattr(self, "_conn") and self._conn:
            try:
                self._conn.close()
            except Exception:
                pass


def _create_connection() -> sqlite3.Connection:
    """Create a fresh database connection.

    Returns:
        SQLite connection with row_factory set to sqlite3.Row
        and foreign keys enabled.
    """
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_core(atomic: bool = False) -> Core:
    """
    Get a database Core instance.

    Args:
        atomic: If True, returns a Core that MUST be used as context manager.
                All operations inside the block commit together on exit.
                If False (default), the caller commits explicitly.

    Examples:
        Read-only use:
        >>> core = get_core()
        >>> account = core.account.get_by_id(account_id)

        Atomic mode:
        >>> with get_core(atomic=True) as core:
        ...     core.account.update_last_login(account_id)
    """
    conn = _create_connection()
    return Core(conn, atomic=atomic)


# ============================================================================
# DATABASE INITIALIZATION
# ============================================================================

SCHEMA_PATH = Path(__file__).parent.parent / "schema" / "schema.sql"


def init_db():
    """Initialize database by running schema.sql if not already initialized."""
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with sqlite3.connect(str(db_path)) as db:
        cursor = db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='_schema_metadata'"
        )
        if cursor.fetchone():
            return

        db.executescript(SCHEMA_PATH.read_text())
        db.commit()
