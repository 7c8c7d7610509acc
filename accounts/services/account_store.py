"""
Account persistence.

``AccountRepository`` is the interface the services depend on;
``MongoAccountStore`` implements it on the ``users`` collection.

The refresh-token list and the pending OTP challenge are only ever changed
through targeted, conditional updates (``$push`` / ``$pull``, filtered
``update_one`` and single-write pipeline updates where an array entry is
replaced). ``save`` never writes them, so a stale in-memory account
cannot undo a concurrent rotation or resurrect a consumed code.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from accounts.errors import ConflictError
from accounts.models import Account, OtpChallenge, OtpPurpose, PushToken

logger = logging.getLogger(__name__)

# Fields written by save(); everything else has a dedicated operation
PROFILE_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "googleId",
    "password",
    "isEmailVerified",
    "isPhoneVerified",
    "profilePhoto",
    "socialLinks",
)

# Optional unique fields backed by sparse indexes: unset, never store null
SPARSE_FIELDS = ("phone", "googleId")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def conflict_from_duplicate_key(error: DuplicateKeyError) -> ConflictError:
    """Translate a unique-index violation into a ConflictError naming the field."""
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    field = next(iter(key_pattern), None)
    if field is None:
        text = str(error)
        field = next((f for f in ("phone", "googleId") if f in text), "email")
    return ConflictError(f"User with this {field} already exists", field=field)


class AccountRepository(ABC):
    """Storage operations the account services rely on."""

    @abstractmethod
    async def find_by_id(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def find_by_email_or_phone(self, identifier: str) -> Optional[Account]:
        """Case-insensitive email match OR exact phone match."""
        pass

    @abstractmethod
    async def find_conflict(
        self,
        email: str,
        phone: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        """Return "email" or "phone" if another account already uses it."""
        pass

    @abstractmethod
    async def find_by_email_or_google_id(self, email: str, google_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Insert a new account. Raises ConflictError on a uniqueness violation."""
        pass

    @abstractmethod
    async def save(self, account: Account) -> Account:
        """Persist profile and verification fields. Raises ConflictError."""
        pass

    @abstractmethod
    async def delete(self, account_id: str) -> bool:
        pass

    @abstractmethod
    async def set_otp(self, account_id: str, challenge: OtpChallenge) -> bool:
        """Replace the pending challenge."""
        pass

    @abstractmethod
    async def consume_otp(
        self,
        account_id: str,
        code: str,
        purposes: Iterable[OtpPurpose],
        set_fields: Dict[str, Any],
        add_refresh_token: Optional[str] = None,
        clear_refresh_tokens: bool = False,
    ) -> bool:
        """
        Clear the challenge and apply ``set_fields`` in one write, only if the
        stored challenge still has this code and one of ``purposes``.

        Returns False when another request consumed or replaced it first.
        """
        pass

    @abstractmethod
    async def add_refresh_token(
        self,
        account_id: str,
        token: str,
        prune: Iterable[str] = (),
    ) -> bool:
        """Append ``token``, dropping any of ``prune`` in the same write."""
        pass

    @abstractmethod
    async def rotate_refresh_token(self, account_id: str, old_token: str, new_token: str) -> bool:
        """
        Remove ``old_token`` and add ``new_token``.

        Only the caller that actually removed ``old_token`` adds the
        replacement; returns False if the token was no longer present.
        """
        pass

    @abstractmethod
    async def remove_refresh_token(self, account_id: str, token: str) -> bool:
        pass

    @abstractmethod
    async def clear_refresh_tokens(self, account_id: str) -> bool:
        pass

    @abstractmethod
    async def upsert_push_token(self, account_id: str, push_token: PushToken) -> bool:
        """Register a device token, replacing any token for the same platform."""
        pass


class MongoAccountStore(AccountRepository):
    """
    MongoDB-backed account repository.
    Accounts live in the ``users`` collection, one document per account.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize MongoAccountStore.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db["users"]

    @staticmethod
    def _object_id(account_id: str) -> Optional[ObjectId]:
        try:
            return ObjectId(account_id)
        except (InvalidId, TypeError):
            return None

    async def ensure_indexes(self) -> None:
        """Create the unique indexes that back email/phone/googleId uniqueness."""
        await self._users_collection.create_index("email", unique=True)
        await self._users_collection.create_index("phone", unique=True, sparse=True)
        await self._users_collection.create_index("googleId", unique=True, sparse=True)
        logger.info("User collection indexes ensured")

    async def _find_one(self, query: dict) -> Optional[Account]:
        doc = await self._users_collection.find_one(query)
        return Account.from_document(doc) if doc else None

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        oid = self._object_id(account_id)
        if oid is None:
            return None
        return await self._find_one({"_id": oid})

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await self._find_one({"email": normalize_email(email)})

    async def find_by_email_or_phone(self, identifier: str) -> Optional[Account]:
        identifier = (identifier or "").strip()
        return await self._find_one({
            "$or": [
                {"email": identifier.lower()},
                {"phone": identifier},
            ]
        })

    async def find_conflict(
        self,
        email: str,
        phone: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        base: Dict[str, Any] = {}
        if exclude_id:
            oid = self._object_id(exclude_id)
            if oid is not None:
                base["_id"] = {"$ne": oid}

        if await self._users_collection.find_one({**base, "email": normalize_email(email)}, {"_id": 1}):
            return "email"
        if phone and await self._users_collection.find_one({**base, "phone": phone}, {"_id": 1}):
            return "phone"
        return None

    async def find_by_email_or_google_id(self, email: str, google_id: str) -> Optional[Account]:
        return await self._find_one({
            "$or": [
                {"email": normalize_email(email)},
                {"googleId": google_id},
            ]
        })

    async def create(self, account: Account) -> Account:
        account.email = normalize_email(account.email)
        try:
            result = await self._users_collection.insert_one(account.to_document())
        except DuplicateKeyError as e:
            raise conflict_from_duplicate_key(e)

        account.id = str(result.inserted_id)
        logger.info(f"Account created: {account.id}")
        return account

    async def save(self, account: Account) -> Account:
        oid = self._object_id(account.id)
        if oid is None:
            raise ValueError("Cannot save an account without a valid id")

        account.email = normalize_email(account.email)
        account.updatedAt = datetime.now(timezone.utc)

        doc = account.model_dump(include=set(PROFILE_FIELDS) | {"updatedAt"})
        unset = {field: "" for field in SPARSE_FIELDS if doc.get(field) is None}
        for field in unset:
            doc.pop(field, None)

        update: Dict[str, Any] = {"$set": doc}
        if unset:
            update["$unset"] = unset

        try:
            await self._users_collection.update_one({"_id": oid}, update)
        except DuplicateKeyError as e:
            raise conflict_from_duplicate_key(e)

        return account

    async def delete(self, account_id: str) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False
        result = await self._users_collection.delete_one({"_id": oid})
        if result.deleted_count:
            logger.info(f"Account deleted: {account_id}")
        return result.deleted_count == 1

    async def set_otp(self, account_id: str, challenge: OtpChallenge) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False
        result = await self._users_collection.update_one(
            {"_id": oid},
            {"$set": {"otp": challenge.model_dump(), "updatedAt": datetime.now(timezone.utc)}}
        )
        return result.matched_count == 1

    async def consume_otp(
        self,
        account_id: str,
        code: str,
        purposes: Iterable[OtpPurpose],
        set_fields: Dict[str, Any],
        add_refresh_token: Optional[str] = None,
        clear_refresh_tokens: bool = False,
    ) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False

        fields = {**set_fields, "updatedAt": datetime.now(timezone.utc)}
        if clear_refresh_tokens:
            fields["refreshTokens"] = []

        update: Dict[str, Any] = {
            "$set": fields,
            "$unset": {"otp": ""},
        }
        if add_refresh_token and not clear_refresh_tokens:
            update["$push"] = {"refreshTokens": add_refresh_token}

        result = await self._users_collection.update_one(
            {
                "_id": oid,
                "otp.code": code,
                "otp.type": {"$in": [OtpPurpose(p).value for p in purposes]},
            },
            update
        )
        return result.modified_count == 1

    async def add_refresh_token(
        self,
        account_id: str,
        token: str,
        prune: Iterable[str] = (),
    ) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False

        prune = list(prune)
        if not prune:
            update: Any = {"$push": {"refreshTokens": token}}
        else:
            update = [{"$set": {"refreshTokens": {"$concatArrays": [
                {"$filter": {
                    "input": {"$ifNull": ["$refreshTokens", []]},
                    "cond": {"$not": [{"$in": ["$$this", {"$literal": prune}]}]},
                }},
                {"$literal": [token]},
            ]}}}]

        result = await self._users_collection.update_one({"_id": oid}, update)
        if prune and result.matched_count:
            logger.info(f"Pruned {len(prune)} stale refresh token(s) for account {account_id}")
        return result.matched_count == 1

    async def rotate_refresh_token(self, account_id: str, old_token: str, new_token: str) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False

        # Pipeline update: remove and append in one write
        result = await self._users_collection.update_one(
            {"_id": oid, "refreshTokens": old_token},
            [{"$set": {"refreshTokens": {"$concatArrays": [
                {"$filter": {
                    "input": "$refreshTokens",
                    "cond": {"$ne": ["$$this", {"$literal": old_token}]},
                }},
                {"$literal": [new_token]},
            ]}}}]
        )
        if result.modified_count != 1:
            logger.warning(f"Refresh token for account {account_id} already rotated or revoked")
            return False
        return True

    async def remove_refresh_token(self, account_id: str, token: str) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False
        result = await self._users_collection.update_one(
            {"_id": oid},
            {"$pull": {"refreshTokens": token}}
        )
        return result.modified_count == 1

    async def clear_refresh_tokens(self, account_id: str) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False
        result = await self._users_collection.update_one(
            {"_id": oid},
            {"$set": {"refreshTokens": []}}
        )
        logger.info(f"All refresh tokens revoked for account {account_id}")
        return result.matched_count == 1

    async def upsert_push_token(self, account_id: str, push_token: PushToken) -> bool:
        oid = self._object_id(account_id)
        if oid is None:
            return False

        entry = push_token.model_dump()
        result = await self._users_collection.update_one(
            {"_id": oid},
            [{"$set": {"pushTokens": {"$concatArrays": [
                {"$filter": {
                    "input": {"$ifNull": ["$pushTokens", []]},
                    "cond": {"$ne": ["$$this.platform", {"$literal": entry["platform"]}]},
                }},
                {"$literal": [entry]},
            ]}}}]
        )
        return result.matched_count == 1
