"""
Abstract authentication interfaces.

Defines the contracts for the pluggable pieces of the auth stack so the
application can swap implementations (bcrypt vs. a test double, Google vs.
another identity provider) without changing its own code.

Example:
    from common.auth import BcryptPasswordHasher, GoogleIdentityVerifier

    hasher = BcryptPasswordHasher(rounds=12)
    verifier = GoogleIdentityVerifier(client_id=settings.GOOGLE_CLIENT_ID)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class IdentityVerificationError(ValueError):
    """Raised when a federated identity assertion cannot be trusted."""


@dataclass(frozen=True)
class FederatedIdentity:
    """Verified claims extracted from a third-party identity token."""

    subject: str
    email: Optional[str]
    email_verified: bool = False
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    picture: Optional[str] = None


class PasswordHasher(ABC):
    """
    One-way password hashing capability.

    Implementations must never raise on a malformed stored hash; a hash
    that cannot be checked simply does not verify.
    """

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """Hash a plaintext password for storage."""
        pass

    @abstractmethod
    def verify_password(self, password: str, hashed: str) -> bool:
        """Return True if password matches the stored hash."""
        pass


class IdentityVerifier(ABC):
    """
    Verifies identity assertions issued by an external provider.
    """

    @abstractmethod
    async def verify(self, token: str) -> FederatedIdentity:
        """
        Verify an identity token.

        Args:
            token: The raw token issued by the provider

        Returns:
            FederatedIdentity with the verified claims

        Raises:
            IdentityVerificationError: If the token is invalid, expired, or
                issued for another audience
        """
        pass
