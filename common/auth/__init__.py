"""
Authentication module - Token issuing, password hashing, federated identity.
"""

from common.auth.base import (
    FederatedIdentity,
    IdentityVerificationError,
    IdentityVerifier,
    PasswordHasher,
)
from common.auth.jwt_auth import (
    InvalidTokenError,
    JWTAuth,
    TokenClaims,
    TokenKind,
    TokenPair,
)
from common.auth.password import BcryptPasswordHasher, UNUSABLE_PASSWORD
from common.auth.google_auth import GoogleIdentityVerifier

__all__ = [
    "FederatedIdentity",
    "IdentityVerificationError",
    "IdentityVerifier",
    "PasswordHasher",
    "InvalidTokenError",
    "JWTAuth",
    "TokenClaims",
    "TokenKind",
    "TokenPair",
    "BcryptPasswordHasher",
    "UNUSABLE_PASSWORD",
    "GoogleIdentityVerifier",
]
