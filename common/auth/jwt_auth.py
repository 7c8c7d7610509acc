"""
JWT token issuer.

Mints and verifies signed, time-bounded bearer tokens. Access and refresh
tokens are signed with the same secret but carry an explicit ``type`` claim,
and verification always states which kind the caller expects so a refresh
token can never pass as an access token or the other way round.

Example:
    auth = JWTAuth(
        secret="your-secret-key",
        access_token_expire_minutes=60,
        refresh_token_expire_days=30,
    )

    pair = auth.create_token_pair(user_id)

    claims = auth.verify_token(pair.access_token, TokenKind.ACCESS)
    print(claims.subject)  # user_id
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import jwt, JWTError


class InvalidTokenError(ValueError):
    """Raised when a token fails signature, expiry, structure or kind checks."""


class TokenKind(str, Enum):
    """Discriminant stored in the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded, validated token payload."""

    subject: str
    kind: TokenKind
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token minted together."""

    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
        }


class JWTAuth:
    """
    JWT token issuer.

    Tokens are stateless. Revocation of refresh tokens is the caller's job
    (see the account store's refresh-token list).
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60 * 24 * 7,
        refresh_token_expire_days: int = 30,
    ):
        """
        Initialize JWT issuer.

        Args:
            secret: Secret key for JWT signing (keep this secure!)
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token lifetime
            refresh_token_expire_days: Refresh token lifetime
        """
        if not secret:
            raise ValueError("JWT secret must not be empty")

        self.secret = secret
        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=refresh_token_expire_days)

    def _lifetime(self, kind: TokenKind) -> timedelta:
        if kind is TokenKind.REFRESH:
            return self.refresh_token_expire
        return self.access_token_expire

    def create_token(
        self,
        subject: str,
        kind: TokenKind = TokenKind.ACCESS,
        ttl: Optional[timedelta] = None,
        **claims: Any,
    ) -> str:
        """
        Create a signed token.

        Args:
            subject: The account ID the token is issued for
            kind: Access or refresh
            ttl: Override of the configured lifetime for this kind
            **claims: Additional claims to include in the token

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        expire = now + (ttl if ttl is not None else self._lifetime(kind))
        payload = {
            **claims,
            "sub": str(subject),
            "type": kind.value,
            # Unique per token so two tokens minted in the same second differ
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def create_token_pair(self, subject: str) -> TokenPair:
        """Mint a fresh access + refresh token pair for an account."""
        return TokenPair(
            access_token=self.create_token(subject, TokenKind.ACCESS),
            refresh_token=self.create_token(subject, TokenKind.REFRESH),
        )

    def verify_token(self, token: str, expected_kind: TokenKind) -> TokenClaims:
        """
        Verify and decode a token.

        Args:
            token: Encoded JWT
            expected_kind: The kind the caller is about to use the token as

        Returns:
            TokenClaims for the token

        Raises:
            InvalidTokenError: Bad signature, expired, malformed, or wrong kind
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is empty")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
            )
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        subject = payload.get("sub")
        kind = payload.get("type")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")

        if not subject or not isinstance(subject, str):
            raise InvalidTokenError("Token missing subject")
        if kind != expected_kind.value:
            raise InvalidTokenError(f"Expected {expected_kind.value} token")
        if not isinstance(expires_at, (int, float)) or not isinstance(issued_at, (int, float)):
            raise InvalidTokenError("Token missing timestamps")

        return TokenClaims(
            subject=subject,
            kind=expected_kind,
            token_id=str(payload.get("jti", "")),
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )
