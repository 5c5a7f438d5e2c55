"""Session authority: register, login, logout, refresh and profile operations.

Each operation receives the Core (credential store) it works against and
raises typed GameCardError subclasses on failure. The authority keeps no
state between calls; signing configuration comes from the injected
TokenIssuer and TokenVerifier.

Token versioning:
- Accounts start at token_version 0.
- Logout and logout-all both bump the version by one, which invalidates every
  token issued before (there is one counter per account, not per device).
- A successful refresh bumps the version too, so each refresh token works
  exactly once. The bump is a compare-and-increment, so two concurrent
  refreshes with the same token cannot both succeed.
"""

import logging
import sqlite3

from ..db import Core
from ..exceptions import (
    AuthenticationError,
    BadCredentialError,
    ConflictError,
    InvalidTokenError,
    TokenExpiredError,
)
from . import passwords
from .schemas import (
    Account,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    TokenPair,
    TokenType,
)
from .token import TokenIssuer, TokenVerifier, get_token_issuer, get_token_verifier

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class SessionAuthority:
    """Orchestrates the account session lifecycle."""

    def __init__(self, issuer: TokenIssuer, verifier: TokenVerifier):
        self.issuer = issuer
        self.verifier = verifier

    # ========================================================================
    # Registration and Login
    # ========================================================================

    def register(self, core: Core, data: RegisterRequest) -> tuple[Account, TokenPair]:
        """
        Create an account and issue its first token pair (version 0).

        Raises:
            ConflictError: If username or email is already registered
        """
        if core.account.username_taken(data.username):
            raise ConflictError(
                "Username already exists",
                {"code": "ACCOUNT_EXISTS", "field": "username"}
            )
        if core.account.email_taken(data.email):
            raise ConflictError(
                "Email already exists",
                {"code": "ACCOUNT_EXISTS", "field": "email"}
            )

        password_hash = passwords.hash_password(data.password)
        try:
            account = core.account.create(data.username, data.email, password_hash)
        except sqlite3.IntegrityError:
            # Lost a race with a concurrent registration
            logger.warning(f"Registration conflict for username: {data.username}")
            raise ConflictError(
                "Username or email already exists",
                {"code": "ACCOUNT_EXISTS"}
            )

        tokens = self.issuer.issue_pair(account.id, account.token_version)
        logger.info(f"Account registered: {account.username}")
        return account, tokens

    def login(self, core: Core, data: LoginRequest) -> tuple[Account, TokenPair]:
        """
        Authenticate by email and password.

        Unknown email, inactive account and wrong password all produce the
        same error so the response does not reveal which accounts exist.

        Raises:
            AuthenticationError: If credentials are invalid
        """
        found = core.account.get_with_password_hash_by_email(data.email)
        if found is None:
            passwords.burn_verification(data.password)
            logger.warning("Failed login attempt: no active account for email")
            raise AuthenticationError(
                INVALID_CREDENTIALS_MESSAGE, {"code": "INVALID_CREDENTIALS"}
            )

        account, password_hash = found
        if not passwords.verify_password(data.password, password_hash):
            logger.warning(f"Failed login attempt for account: {account.id}")
            raise AuthenticationError(
                INVALID_CREDENTIALS_MESSAGE, {"code": "INVALID_CREDENTIALS"}
            )

        core.account.update_last_login(account.id)
        account = core.account.get_by_id(account.id)
        tokens = self.issuer.issue_pair(account.id, account.token_version)
        logger.info(f"Successful login: {account.username}")
        return account, tokens

    # ========================================================================
    # Logout
    # ========================================================================

    def logout(self, core: Core, account: Account) -> int:
        """Invalidate the account's outstanding tokens. Returns the new version."""
        version = core.account.bump_token_version(account.id)
        logger.info(f"Logout: account {account.id} now at token version {version}")
        return version

    def logout_all_devices(self, core: Core, account: Account) -> int:
        """Invalidate every token issued to the account on any device.

        Same effect as logout() because sessions share one version counter.
        """
        version = core.account.bump_token_version(account.id)
        logger.info(f"Logout all devices: account {account.id} now at token version {version}")
        return version

    # ========================================================================
    # Refresh
    # ========================================================================

    def refresh(self, core: Core, refresh_token: str | None) -> tuple[Account, TokenPair]:
        """
        Exchange a refresh token for a new token pair, rotating the version.

        Raises:
            AuthenticationError: Missing token, unavailable account, or
                token already invalidated (TOKEN_INVALIDATED)
            TokenExpiredError: Refresh token expired (REFRESH_EXPIRED)
            InvalidTokenError: Bad signature, malformed, or wrong token type
        """
        if not refresh_token:
            raise AuthenticationError(
                "Refresh token not found", {"code": "REFRESH_TOKEN_MISSING"}
            )

        try:
            claims = self.verifier.verify(refresh_token)
        except TokenExpiredError:
            logger.info("Refresh rejected: refresh token expired")
            raise TokenExpiredError("Refresh token expired", {"code": "REFRESH_EXPIRED"})

        if claims.type != TokenType.REFRESH:
            logger.warning(f"Refresh rejected: {claims.type} token presented for account {claims.sub}")
            raise InvalidTokenError("Invalid token type", {"code": "INVALID_TOKEN_TYPE"})

        account = core.account.find_by_id(claims.sub)
        if account is None or not account.is_active:
            logger.warning(f"Refresh rejected: account {claims.sub} missing or inactive")
            raise AuthenticationError(
                "User not found or inactive", {"code": "ACCOUNT_UNAVAILABLE"}
            )

        if claims.ver != account.token_version:
            logger.warning(
                f"Refresh rejected: stale token version {claims.ver} "
                f"(current {account.token_version}) for account {account.id}"
            )
            raise AuthenticationError(
                "Token has been invalidated", {"code": "TOKEN_INVALIDATED"}
            )

        if not core.account.bump_token_version_if(account.id, expected=claims.ver):
            logger.warning(f"Refresh rejected: concurrent rotation for account {account.id}")
            raise AuthenticationError(
                "Token has been invalidated", {"code": "TOKEN_INVALIDATED"}
            )

        account = core.account.get_by_id(account.id)
        tokens = self.issuer.issue_pair(account.id, account.token_version)
        logger.info(f"Tokens refreshed for account {account.id} at version {account.token_version}")
        return account, tokens

    # ========================================================================
    # Profile
    # ========================================================================

    def get_profile(self, account: Account) -> Account:
        return account

    def update_profile(self, core: Core, account: Account, data: ProfileUpdate) -> Account:
        """
        Change username and/or merge profile fields.

        Raises:
            ConflictError: If the new username belongs to another account
        """
        username = data.username
        if username is not None and username == account.username:
            username = None
        if username is not None and core.account.username_taken(username, exclude_id=account.id):
            raise ConflictError(
                "Username already exists",
                {"code": "ACCOUNT_EXISTS", "field": "username"}
            )

        profile = data.profile.model_dump(exclude_unset=True) if data.profile else None
        try:
            core.account.update_profile(account.id, username=username, profile=profile)
        except sqlite3.IntegrityError:
            raise ConflictError(
                "Username already exists",
                {"code": "ACCOUNT_EXISTS", "field": "username"}
            )

        logger.info(f"Profile updated for account {account.id}")
        return core.account.get_by_id(account.id)

    def change_password(self, core: Core, account: Account, data: ChangePasswordRequest) -> None:
        """
        Replace the password after re-verifying the current one.

        Raises:
            BadCredentialError: If current_password does not match
        """
        password_hash = core.account.get_password_hash(account.id)
        if password_hash is None or not passwords.verify_password(data.current_password, password_hash):
            logger.warning(f"Change password rejected for account {account.id}")
            raise BadCredentialError(
                "Current password is incorrect",
                {"code": "INVALID_CURRENT_PASSWORD"}
            )

        core.account.update_password_hash(account.id, passwords.hash_password(data.new_password))
        logger.info(f"Password changed for account {account.id}")

    # ========================================================================
    # Deactivation
    # ========================================================================

    def deactivate(self, core: Core, account_id: str) -> None:
        """Soft-deactivate an account and invalidate its tokens."""
        core.account.set_active(account_id, False)
        core.account.bump_token_version(account_id)
        logger.info(f"Account deactivated: {account_id}")


def get_session_authority() -> SessionAuthority:
    """Build a SessionAuthority wired to issuer/verifier from settings."""
    return SessionAuthority(get_token_issuer(), get_token_verifier())
