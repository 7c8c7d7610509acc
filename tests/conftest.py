"""Shared test fixtures for the Tamu accounts API tests."""

import pytest
from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.auth import (
    BcryptPasswordHasher,
    FederatedIdentity,
    IdentityVerificationError,
    IdentityVerifier,
    JWTAuth,
)
from accounts.errors import ConflictError
from accounts.models import Account, OtpChallenge, OtpPurpose, PushToken
from accounts.services.account_store import (
    AccountRepository,
    PROFILE_FIELDS,
    normalize_email,
)
from accounts.services.auth_service import AuthService


# ─────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────


class InMemoryAccountRepository(AccountRepository):
    """Dict-backed repository with the same conditional-update rules as Mongo."""

    def __init__(self):
        self.accounts: Dict[str, Account] = {}

    def _get(self, account_id: str) -> Optional[Account]:
        return self.accounts.get(account_id)

    def _copy(self, account: Optional[Account]) -> Optional[Account]:
        return account.model_copy(deep=True) if account else None

    def _check_unique(self, account: Account) -> None:
        for other in self.accounts.values():
            if other.id == account.id:
                continue
            if other.email == account.email:
                raise ConflictError("User with this email already exists", field="email")
            if account.phone and other.phone == account.phone:
                raise ConflictError("User with this phone already exists", field="phone")
            if account.googleId and other.googleId == account.googleId:
                raise ConflictError("User with this googleId already exists", field="googleId")

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        return self._copy(self._get(account_id))

    async def find_by_email(self, email: str) -> Optional[Account]:
        email = normalize_email(email)
        return self._copy(next((a for a in self.accounts.values() if a.email == email), None))

    async def find_by_email_or_phone(self, identifier: str) -> Optional[Account]:
        identifier = (identifier or "").strip()
        return self._copy(next(
            (a for a in self.accounts.values()
             if a.email == identifier.lower() or (a.phone and a.phone == identifier)),
            None,
        ))

    async def find_conflict(self, email, phone=None, exclude_id=None) -> Optional[str]:
        others = [a for a in self.accounts.values() if a.id != exclude_id]
        if any(a.email == normalize_email(email) for a in others):
            return "email"
        if phone and any(a.phone == phone for a in others):
            return "phone"
        return None

    async def find_by_email_or_google_id(self, email: str, google_id: str) -> Optional[Account]:
        email = normalize_email(email)
        return self._copy(next(
            (a for a in self.accounts.values() if a.email == email or a.googleId == google_id),
            None,
        ))

    async def create(self, account: Account) -> Account:
        account.email = normalize_email(account.email)
        account.id = str(ObjectId())
        self._check_unique(account)
        self.accounts[account.id] = account.model_copy(deep=True)
        return account

    async def save(self, account: Account) -> Account:
        stored = self._get(account.id)
        if stored is None:
            return account
        account.email = normalize_email(account.email)
        self._check_unique(account)
        for field in PROFILE_FIELDS:
            setattr(stored, field, getattr(account, field))
        return account

    async def delete(self, account_id: str) -> bool:
        return self.accounts.pop(account_id, None) is not None

    async def set_otp(self, account_id: str, challenge: OtpChallenge) -> bool:
        stored = self._get(account_id)
        if stored is None:
            return False
        stored.otp = challenge.model_copy()
        return True

    async def consume_otp(
        self,
        account_id: str,
        code: str,
        purposes: Iterable[OtpPurpose],
        set_fields: Dict[str, Any],
        add_refresh_token: Optional[str] = None,
        clear_refresh_tokens: bool = False,
    ) -> bool:
        stored = self._get(account_id)
        allowed = {OtpPurpose(p).value for p in purposes}
        if stored is None or stored.otp is None:
            return False
        if stored.otp.code != code or stored.otp.type not in allowed:
            return False

        stored.otp = None
        for field, value in set_fields.items():
            setattr(stored, field, value)
        if clear_refresh_tokens:
            stored.refreshTokens = []
        elif add_refresh_token:
            stored.refreshTokens.append(add_refresh_token)
        return True

    async def add_refresh_token(self, account_id: str, token: str, prune=()) -> bool:
        stored = self._get(account_id)
        if stored is None:
            return False
        prune = set(prune)
        stored.refreshTokens = [t for t in stored.refreshTokens if t not in prune]
        stored.refreshTokens.append(token)
        return True

    async def rotate_refresh_token(self, account_id: str, old_token: str, new_token: str) -> bool:
        stored = self._get(account_id)
        if stored is None or old_token not in stored.refreshTokens:
            return False
        stored.refreshTokens.remove(old_token)
        stored.refreshTokens.append(new_token)
        return True

    async def remove_refresh_token(self, account_id: str, token: str) -> bool:
        stored = self._get(account_id)
        if stored is None or token not in stored.refreshTokens:
            return False
        stored.refreshTokens = [t for t in stored.refreshTokens if t != token]
        return True

    async def clear_refresh_tokens(self, account_id: str) -> bool:
        stored = self._get(account_id)
        if stored is None:
            return False
        stored.refreshTokens = []
        return True

    async def upsert_push_token(self, account_id: str, push_token: PushToken) -> bool:
        stored = self._get(account_id)
        if stored is None:
            return False
        stored.pushTokens = [t for t in stored.pushTokens if t.platform != push_token.platform]
        stored.pushTokens.append(push_token.model_copy())
        return True


class RecordingNotifier:
    """Captures notifications instead of scheduling them."""

    def __init__(self):
        self.otps: List[tuple] = []
        self.welcomes: List[Account] = []

    def send_otp(self, account: Account, challenge: OtpChallenge):
        self.otps.append((account.email, challenge.type, challenge.code))

    def send_welcome(self, account: Account):
        self.welcomes.append(account)

    async def drain(self, timeout=None):
        return None


class FakeIdentityVerifier(IdentityVerifier):
    """Accepts the tokens it was given, rejects everything else."""

    def __init__(self, identities: Optional[Dict[str, FederatedIdentity]] = None):
        self.identities = identities or {}

    async def verify(self, token: str) -> FederatedIdentity:
        if token not in self.identities:
            raise IdentityVerificationError("Invalid Google token")
        return self.identities[token]


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # update_one etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def repository():
    return InMemoryAccountRepository()


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def jwt_auth():
    return JWTAuth(secret="test-secret", access_token_expire_minutes=60, refresh_token_expire_days=30)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def google_identity():
    return FederatedIdentity(
        subject="google-sub-123",
        email="amina@tamu.com",
        email_verified=True,
        given_name="Amina",
        family_name="Otieno",
        picture="https://lh3.googleusercontent.com/a/photo",
    )


@pytest.fixture
def identity_verifier(google_identity):
    return FakeIdentityVerifier({"valid-google-token": google_identity})


@pytest.fixture
def auth_service(repository, hasher, jwt_auth, identity_verifier, notifier):
    return AuthService(
        repository=repository,
        hasher=hasher,
        jwt_auth=jwt_auth,
        identity_verifier=identity_verifier,
        notifier=notifier,
    )
