"""
Pydantic models for profile request validation.
"""

from typing import Optional
from pydantic import BaseModel, Field


class UpdateProfileRequest(BaseModel):
    """Blank or omitted names keep their current value."""
    firstName: Optional[str] = Field(None, max_length=50)
    lastName: Optional[str] = Field(None, max_length=50)


class SocialLinksRequest(BaseModel):
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    currentPassword: str = ""
    newPassword: str = ""
