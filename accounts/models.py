"""
Account document model.

The account is stored as a single MongoDB document in the ``users``
collection. Field names match the stored (camelCase) document so
``from_document`` / ``to_document`` are plain conversions.

The password hash, the pending OTP challenge and the refresh-token list
are server-side state only: none of the client representations
(``to_summary``, ``to_profile``) include them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OtpPurpose(str, Enum):
    EMAIL_VERIFICATION = "email_verification"
    PHONE_VERIFICATION = "phone_verification"
    PASSWORD_RESET = "password_reset"


class Platform(str, Enum):
    ANDROID = "android"
    IOS = "ios"
    WEB = "web"


class OtpChallenge(BaseModel):
    """Pending one-time passcode embedded in the account."""

    model_config = ConfigDict(use_enum_values=True)

    code: str
    expiresAt: datetime
    type: OtpPurpose


class PushToken(BaseModel):
    """Expo push token registered for one device platform."""

    model_config = ConfigDict(use_enum_values=True)

    token: str
    platform: Platform
    updatedAt: datetime = Field(default_factory=utc_now)


class SocialLinks(BaseModel):
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None


class Account(BaseModel):
    """A user account as persisted."""

    model_config = ConfigDict(use_enum_values=True)

    id: Optional[str] = None
    firstName: str
    lastName: str
    email: str
    phone: Optional[str] = None
    googleId: Optional[str] = None
    password: str
    isEmailVerified: bool = False
    isPhoneVerified: bool = False
    profilePhoto: Optional[str] = None
    socialLinks: SocialLinks = Field(default_factory=SocialLinks)
    refreshTokens: List[str] = Field(default_factory=list)
    pushTokens: List[PushToken] = Field(default_factory=list)
    otp: Optional[OtpChallenge] = None
    createdAt: datetime = Field(default_factory=utc_now)
    updatedAt: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Account":
        data = dict(doc)
        _id = data.pop("_id", None)
        if _id is not None:
            data["id"] = str(_id)
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        """Full document for insertion. Optional unique fields are omitted when unset."""
        doc = self.model_dump(exclude={"id"})
        for sparse_field in ("phone", "googleId", "otp"):
            if doc.get(sparse_field) is None:
                doc.pop(sparse_field, None)
        if self.id:
            doc["_id"] = ObjectId(self.id)
        return doc

    def to_summary(self, include_timestamps: bool = False) -> Dict[str, Any]:
        """Representation returned by the auth endpoints."""
        summary = {
            "_id": self.id,
            "firstName": self.firstName,
            "lastName": self.lastName,
            "email": self.email,
            "phone": self.phone,
            "isEmailVerified": self.isEmailVerified,
            "isPhoneVerified": self.isPhoneVerified,
        }
        if include_timestamps:
            summary["createdAt"] = self.createdAt
            summary["updatedAt"] = self.updatedAt
        return summary

    def to_profile(self) -> Dict[str, Any]:
        """Representation returned by the profile endpoints."""
        return {
            "id": self.id,
            "firstName": self.firstName,
            "lastName": self.lastName,
            "email": self.email,
            "phone": self.phone,
            "avatar": self.profilePhoto,
            "isEmailVerified": self.isEmailVerified,
            "isPhoneVerified": self.isPhoneVerified,
            "role": "user",
            "createdAt": self.createdAt,
            "updatedAt": self.updatedAt,
            "socials": self.socialLinks.model_dump(),
        }
