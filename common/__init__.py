"""
Common library for reusable infrastructure components.

- database: Async MongoDB connection with Motor
- auth: JWT token issuing, bcrypt password hashing, Google identity verification
- utils: Response envelope, HTTP exceptions, password rules
- config: Base settings class
"""

from common.database import MongoDB
from common.auth import (
    BcryptPasswordHasher,
    GoogleIdentityVerifier,
    IdentityVerifier,
    JWTAuth,
    PasswordHasher,
    TokenKind,
)
from common.utils import (
    success_response,
    error_response,
    APIException,
    UnauthorizedException,
    PasswordPolicy,
    validate_password,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Auth
    "BcryptPasswordHasher",
    "GoogleIdentityVerifier",
    "IdentityVerifier",
    "JWTAuth",
    "PasswordHasher",
    "TokenKind",
    # Utils
    "success_response",
    "error_response",
    "APIException",
    "UnauthorizedException",
    "PasswordPolicy",
    "validate_password",
    # Config
    "BaseAppSettings",
]
