"""Account operations (credential store).

IMPORT CONVENTION:
- Core accesses these through core.account property
- NO direct import needed when using Core API

Password hashes never leave this module except through
get_with_password_hash_by_email() and get_password_hash(), which exist only
for the session authority's credential checks. Every other read returns an
Account model without the hash.
"""

import sqlite3

from ..auth.schemas import Account, GameStats, ProfileFields
from ..exceptions import ResourceNotFound
from ..utils import isodatetime, uid

PROFILE_COLUMNS = ("first_name", "last_name", "avatar", "bio")


def _row_to_account(row: sqlite3.Row) -> Account:
    """Convert an accounts row to an Account model (hash dropped)."""
    return Account(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        token_version=row["token_version"],
        is_active=bool(row["is_active"]),
        last_login=row["last_login"],
        profile=ProfileFields(**{col: row[col] for col in PROFILE_COLUMNS}),
        game_stats=GameStats(
            games_played=row["games_played"],
            games_won=row["games_won"],
            total_score=row["total_score"],
            level=row["level"],
        ),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class AccountOperations:
    """Account persistence.

    All mutations are single statements against one row, so each is atomic
    on its own; the caller decides when to commit.
    """

    def __init__(self, conn: sqlite3.Connection):
        """Initialize account operations with a database connection.

        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, username: str, email: str, password_hash: str) -> Account:
        """Create an account with token_version 0.

        Args:
            username: Validated username
            email: Normalized (lower-cased) email
            password_hash: bcrypt digest

        Returns:
            The created Account

        Raises:
            sqlite3.IntegrityError: If username or email already exists
        """
        account_id = uid.generate_uuid()
        now = isodatetime.now()
        self._conn.execute(
            """INSERT INTO accounts (id, username, email, password_hash, token_version,
                                     is_active, created_at, updated_at)
               VALUES (?, ?, ?, ?, 0, 1, ?, ?)""",
            (account_id, username, email, password_hash, now, now)
        )
        return self.get_by_id(account_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_id(self, account_id: str) -> Account | None:
        row = self._conn.execute(
            "SELECT * FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return _row_to_account(row) if row else None

    def get_by_id(self, account_id: str) -> Account:
        """Get account by ID.

        Raises:
            ResourceNotFound: If account_id doesn't exist
        """
        account = self.find_by_id(account_id)
        if account is None:
            raise ResourceNotFound(
                f"Account '{account_id}' not found",
                {"account_id": account_id}
            )
        return account

    def username_taken(self, username: str, exclude_id: str | None = None) -> bool:
        """Case-insensitive username existence check."""
        row = self._conn.execute(
            "SELECT id FROM accounts WHERE username = ? AND id IS NOT ?",
            (username, exclude_id)
        ).fetchone()
        return row is not None

    def email_taken(self, email: str) -> bool:
        row = self._conn.execute(
            "SELECT id FROM accounts WHERE email = ?", (email,)
        ).fetchone()
        return row is not None

    def get_with_password_hash_by_email(self, email: str) -> tuple[Account, str] | None:
        """Load an ACTIVE account and its password hash by email.

        Returns:
            (Account, password_hash) or None if no active account matches
        """
        row = self._conn.execute(
            "SELECT * FROM accounts WHERE email = ? AND is_active = 1",
            (email,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_account(row), row["password_hash"]

    def get_password_hash(self, account_id: str) -> str | None:
        row = self._conn.execute(
            "SELECT password_hash FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return row["password_hash"] if row else None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_last_login(self, account_id: str) -> None:
        now = isodatetime.now()
        self._conn.execute(
            "UPDATE accounts SET last_login = ?, updated_at = ? WHERE id = ?",
            (now, now, account_id)
        )

    def update_profile(
        self,
        account_id: str,
        username: str | None = None,
        profile: dict | None = None
    ) -> None:
        """Update username and/or profile columns.

        Args:
            account_id: Account to update
            username: New username, or None to keep
            profile: Mapping of profile column -> value; only given keys change

        Raises:
            sqlite3.IntegrityError: If the new username is taken
        """
        updates: dict[str, object] = {}
        if username is not None:
            updates["username"] = username
        for column, value in (profile or {}).items():
            if column not in PROFILE_COLUMNS:
                raise ValueError(f"Unknown profile field: {column}")
            updates[column] = value
        if not updates:
            return

        updates["updated_at"] = isodatetime.now()
        assignments = ", ".join(f"{column} = ?" for column in updates)
        self._conn.execute(
            f"UPDATE accounts SET {assignments} WHERE id = ?",
            (*updates.values(), account_id)
        )

    def update_password_hash(self, account_id: str, password_hash: str) -> None:
        self._conn.execute(
            "UPDATE accounts SET password_hash = ?, updated_at = ? WHERE id = ?",
            (password_hash, isodatetime.now(), account_id)
        )

    def bump_token_version(self, account_id: str) -> int:
        """Increment token_version by exactly one.

        Returns:
            The new token version

        Raises:
            ResourceNotFound: If account_id doesn't exist
        """
        cursor = self._conn.execute(
            """UPDATE accounts
               SET token_version = token_version + 1, updated_at = ?
               WHERE id = ?""",
            (isodatetime.now(), account_id)
        )
        if cursor.rowcount == 0:
            raise ResourceNotFound(
                f"Account '{account_id}' not found",
                {"account_id": account_id}
            )
        return self._conn.execute(
            "SELECT token_version FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()["token_version"]

    def bump_token_version_if(self, account_id: str, expected: int) -> bool:
        """Compare-and-increment token_version.

        Sets token_version = expected + 1 only if it currently equals
        expected and the account is active.

        Returns:
            True if this call performed the increment, False otherwise
        """
        cursor = self._conn.execute(
            """UPDATE accounts
               SET token_version = token_version + 1, updated_at = ?
               WHERE id = ? AND token_version = ? AND is_active = 1""",
            (isodatetime.now(), account_id, expected)
        )
        return cursor.rowcount == 1

    def set_active(self, account_id: str, is_active: bool) -> None:
        self._conn.execute(
            "UPDATE accounts SET is_active = ?, updated_at = ? WHERE id = ?",
            (int(is_active), isodatetime.now(), account_id)
        )
