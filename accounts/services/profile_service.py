"""
Profile service for account profile management.

Handles profile reads and updates, social links, photo uploads, password
changes and account deletion for the authenticated account.
"""

import asyncio
import logging
import re
from typing import Dict, Optional

from common.auth import PasswordHasher
from common.utils.password import validate_password

from accounts.errors import ConflictError, NotFoundError, ValidationError
from accounts.models import Account, SocialLinks
from accounts.services.account_store import AccountRepository, normalize_email
from accounts.services.photo_storage import PhotoStorage

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
NAME_MAX_LENGTH = 50


class ProfileService:
    """
    Manages account profile data.
    """

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher,
        photo_storage: PhotoStorage,
    ):
        """
        Initialize ProfileService.

        Args:
            repository: Account storage
            hasher: Password hash/verify capability
            photo_storage: Where uploaded profile photos go
        """
        self._repository = repository
        self._hasher = hasher
        self._photo_storage = photo_storage

    async def _load(self, account_id: str) -> Account:
        account = await self._repository.find_by_id(account_id)
        if account is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        return account

    @staticmethod
    def _clean_name(value: str, field: str) -> str:
        value = (value or "").strip()
        if len(value) > NAME_MAX_LENGTH:
            raise ValidationError(
                f"{field} cannot exceed {NAME_MAX_LENGTH} characters",
                code="FIELD_TOO_LONG",
            )
        return value

    async def get_profile(self, account_id: str) -> Account:
        return await self._load(account_id)

    async def update_account(
        self,
        account_id: str,
        first_name: str,
        last_name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> Account:
        """
        Replace the core account fields.

        Changing the email resets email verification.

        Raises:
            ValidationError: Missing required field or malformed phone
            ConflictError: Email or phone belongs to another account
            NotFoundError: Account no longer exists
        """
        first_name = self._clean_name(first_name, "First name")
        last_name = self._clean_name(last_name, "Last name")
        email = normalize_email(email)
        phone = phone.strip() if phone and phone.strip() else None

        if not first_name or not last_name or not email:
            raise ValidationError("Missing required fields", code="MISSING_FIELDS")
        if phone and not PHONE_PATTERN.match(phone):
            raise ValidationError("Please enter a valid phone number", code="INVALID_PHONE")

        account = await self._load(account_id)

        conflict = await self._repository.find_conflict(email, phone, exclude_id=account.id)
        if conflict:
            raise ConflictError(f"{conflict.capitalize()} already in use", field=conflict)

        if email != account.email:
            account.isEmailVerified = False
        if phone != account.phone:
            account.isPhoneVerified = False

        account.firstName = first_name
        account.lastName = last_name
        account.email = email
        account.phone = phone

        account = await self._repository.save(account)
        logger.info(f"Profile updated for account {account.id}")
        return account

    async def update_names(
        self,
        account_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Account:
        """Update first/last name; blank values keep the current name."""
        account = await self._load(account_id)

        first_name = self._clean_name(first_name, "First name")
        last_name = self._clean_name(last_name, "Last name")
        account.firstName = first_name or account.firstName
        account.lastName = last_name or account.lastName

        return await self._repository.save(account)

    async def update_social_links(self, account_id: str, links: Dict[str, Optional[str]]) -> Account:
        """Merge the given links over the existing ones."""
        account = await self._load(account_id)

        merged = {**account.socialLinks.model_dump(), **links}
        account.socialLinks = SocialLinks(**merged)

        return await self._repository.save(account)

    async def upload_photo(
        self,
        account_id: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> Account:
        account = await self._load(account_id)

        account.profilePhoto = await self._photo_storage.save(
            account.id, filename, content, content_type
        )
        return await self._repository.save(account)

    async def change_password(
        self,
        account_id: str,
        current_password: str,
        new_password: str,
    ) -> Account:
        """
        Change the password after checking the current one.
        Every refresh token is revoked.

        Raises:
            ValidationError: Missing fields, weak new password, or wrong current password
            NotFoundError: Account no longer exists
        """
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required", code="MISSING_FIELDS")

        is_valid, _ = validate_password(new_password)
        if not is_valid:
            raise ValidationError("New password must be at least 6 characters long", code="WEAK_PASSWORD")

        account = await self._load(account_id)

        matches = await asyncio.to_thread(self._hasher.verify_password, current_password, account.password)
        if not matches:
            raise ValidationError("Current password is incorrect", code="INVALID_PASSWORD")

        account.password = await asyncio.to_thread(self._hasher.hash_password, new_password)
        account = await self._repository.save(account)

        await self._repository.clear_refresh_tokens(account.id)
        account.refreshTokens = []
        logger.info(f"Password changed for account {account.id}")
        return account

    async def logout_all(self, account_id: str) -> None:
        account = await self._load(account_id)
        await self._repository.clear_refresh_tokens(account.id)

    async def delete_account(self, account_id: str) -> None:
        deleted = await self._repository.delete(account_id)
        if not deleted:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        logger.info(f"Account {account_id} deleted by owner")
