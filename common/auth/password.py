"""
bcrypt password hashing.

Passwords are pre-hashed with SHA-256 before bcrypt. This handles bcrypt's
72-byte limit and keeps behavior consistent across all password lengths.
Hashes produced by plain bcrypt (no pre-hash) still verify.

Example:
    hasher = BcryptPasswordHasher()
    stored = hasher.hash_password("s3cret!")
    hasher.verify_password("s3cret!", stored)  # True
"""

import base64
import hashlib

import bcrypt as bcrypt_lib

from common.auth.base import PasswordHasher

# Stored for accounts that must never authenticate by password
# (e.g. created through Google Sign-In). Not a valid bcrypt hash.
UNUSABLE_PASSWORD = "!unusable"


class BcryptPasswordHasher(PasswordHasher):
    """bcrypt hasher with SHA-256 pre-hashing."""

    def __init__(self, rounds: int = 12):
        """
        Initialize the hasher.

        Args:
            rounds: bcrypt cost factor (log2 of the number of rounds)
        """
        self.rounds = rounds

    def _prehash_password(self, password: str) -> str:
        """Pre-hash password with SHA-256 before bcrypt."""
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash).decode("utf-8")

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with SHA-256 pre-hashing."""
        prehashed = self._prehash_password(password)
        salt = bcrypt_lib.gensalt(rounds=self.rounds)
        return bcrypt_lib.hashpw(prehashed.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        Supports both new (SHA-256 pre-hashed) and legacy (direct bcrypt) hashes
        for backwards compatibility.
        """
        if not hashed or hashed == UNUSABLE_PASSWORD:
            return False

        hashed_bytes = hashed.encode("utf-8")

        # Try new method first (SHA-256 pre-hash)
        prehashed = self._prehash_password(password)
        try:
            if bcrypt_lib.checkpw(prehashed.encode("utf-8"), hashed_bytes):
                return True
        except ValueError:
            # Not a bcrypt hash at all
            return False

        # Fallback to legacy method (direct bcrypt) for old hashes
        try:
            return bcrypt_lib.checkpw(password.encode("utf-8"), hashed_bytes)
        except ValueError:
            # Password too long for direct bcrypt - definitely not a match
            return False
