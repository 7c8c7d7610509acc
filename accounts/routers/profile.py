"""
FastAPI router for profile endpoints.

All routes require authentication.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from accounts.dependencies import get_profile_service, require_auth
from accounts.models import Account
from accounts.schemas.profile import (
    UpdateProfileRequest,
    SocialLinksRequest,
    ChangePasswordRequest,
)
from accounts.services.profile_service import ProfileService
from common.utils import success_response

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_profile(
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    profile = await profile_service.get_profile(account.id)
    return success_response("Profile retrieved successfully", user=profile.to_profile())


@router.put("")
async def update_profile(
    body: UpdateProfileRequest,
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Update first/last name. Blank fields keep their current value."""
    updated = await profile_service.update_names(account.id, body.firstName, body.lastName)
    return success_response("Profile updated successfully", user=updated.to_profile())


@router.put("/social-links")
async def update_social_links(
    body: SocialLinksRequest,
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    updated = await profile_service.update_social_links(
        account.id, body.model_dump(exclude_unset=True)
    )
    return success_response("Social links updated successfully", user=updated.to_profile())


@router.post("/photo")
async def upload_profile_photo(
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
    profilePhoto: UploadFile = File(..., description="jpg, jpeg or png image"),
):
    """Upload a profile photo via multipart/form-data."""
    content = await profilePhoto.read()
    updated = await profile_service.upload_photo(
        account.id,
        filename=profilePhoto.filename,
        content=content,
        content_type=profilePhoto.content_type,
    )
    return success_response("Profile photo updated successfully", user=updated.to_profile())


@router.post("/security/change-password")
async def change_password(
    body: ChangePasswordRequest,
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Change password. Every session is logged out."""
    updated = await profile_service.change_password(
        account.id,
        current_password=body.currentPassword,
        new_password=body.newPassword,
    )
    return success_response("Password changed successfully", user=updated.to_profile())


@router.post("/security/logout-all")
async def logout_all_sessions(
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    await profile_service.logout_all(account.id)
    return success_response("All sessions have been logged out")


@router.delete("")
async def delete_account(
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    await profile_service.delete_account(account.id)
    return success_response("Account deleted successfully")
