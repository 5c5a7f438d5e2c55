"""JWT token issuing and verification.

Access and refresh tokens share one signing secret and differ in their
``type`` claim and lifetime. Both classes receive the secret at construction;
get_token_issuer() and get_token_verifier() build them from settings.

Verification here is purely cryptographic and structural. Comparing the
``ver`` claim with the account's current token version is done by the
session authority and the auth gate, which have access to the store.
"""

import logging
from datetime import timedelta

import jwt
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..exceptions import InvalidTokenError, TokenExpiredError
from ..utils import isodatetime, uid
from .schemas import TokenClaims, TokenPair, TokenType

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "ver", "type", "iat", "exp", "jti"]


class TokenIssuer:
    """Signs access/refresh token pairs."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=1),
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def _encode(self, subject_id: str, token_version: int, token_type: TokenType,
                issued_at: int, ttl: timedelta) -> str:
        claims = TokenClaims(
            sub=subject_id,
            ver=token_version,
            type=token_type,
            iat=issued_at,
            exp=issued_at + int(ttl.total_seconds()),
            jti=uid.generate_token_id(),
        )
        return jwt.encode(claims.model_dump(mode="json"), self._secret, algorithm=self._algorithm)

    def issue_pair(self, subject_id: str, token_version: int) -> TokenPair:
        """
        Issue a fresh access/refresh token pair.

        Args:
            subject_id: Account ID (``sub`` claim)
            token_version: Account token version to embed (``ver`` claim)

        Returns:
            TokenPair with both tokens signed by the same secret
        """
        issued_at = isodatetime.now_unix()
        return TokenPair(
            access_token=self._encode(
                subject_id, token_version, TokenType.ACCESS, issued_at, self.access_ttl
            ),
            refresh_token=self._encode(
                subject_id, token_version, TokenType.REFRESH, issued_at, self.refresh_ttl
            ),
        )


class TokenVerifier:
    """Checks signature, expiry and claim structure of a presented token."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            TokenExpiredError: Signature is valid but ``exp`` has passed
            InvalidTokenError: Any other failure (signature, algorithm,
                malformed payload, missing or unexpected claims)
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired", {"code": "TOKEN_EXPIRED"})
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {e.__class__.__name__}")
            raise InvalidTokenError("Invalid token", {"code": "INVALID_TOKEN"})

        try:
            return TokenClaims(**payload)
        except PydanticValidationError:
            logger.debug("Token rejected: unexpected claim structure")
            raise InvalidTokenError("Invalid token", {"code": "INVALID_TOKEN"})


def get_token_issuer() -> TokenIssuer:
    """Build a TokenIssuer from current settings."""
    return TokenIssuer(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        access_ttl=timedelta(minutes=settings.access_token_expiry_minutes),
        refresh_ttl=timedelta(days=settings.refresh_token_expiry_days),
    )


def get_token_verifier() -> TokenVerifier:
    """Build a TokenVerifier from current settings."""
    return TokenVerifier(settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
