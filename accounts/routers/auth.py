"""
FastAPI router for authentication endpoints.

Registration, login, OTP verification, password recovery, token refresh,
logout and Google sign-in.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status

from accounts.dependencies import get_auth_service, get_profile_service, require_auth
from accounts.models import Account
from accounts.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    GoogleSignInRequest,
    VerifyOtpRequest,
    ResendOtpRequest,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UpdateAccountRequest,
    LogoutRequest,
)
from accounts.services.auth_service import AuthResult, AuthService
from accounts.services.profile_service import ProfileService
from common.utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_payload(message: str, result: AuthResult) -> dict:
    return success_response(
        message,
        user=result.account.to_summary(),
        tokens=result.tokens.to_dict(),
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    Register a new account.

    The account starts unverified; a 6-digit code is emailed in the background.
    """
    account = await auth_service.register(
        first_name=body.firstName,
        last_name=body.lastName,
        email=body.email,
        password=body.password,
        confirm_password=body.confirmPassword,
        phone=body.phone,
    )
    return success_response(
        "User registered successfully. Please verify your email with the OTP sent.",
        user=account.to_summary(),
    )


@router.post("/login")
async def login(
    body: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email or phone and password."""
    result = await auth_service.login(body.emailOrPhone, body.password)
    return _auth_payload("Login successful", result)


@router.post("/google-signin")
async def google_signin(
    body: GoogleSignInRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Sign in (or sign up) with a Google ID token."""
    result = await auth_service.google_auth(body.idToken)
    return _auth_payload("Google authentication successful", result)


@router.post("/verify-otp")
async def verify_otp(
    body: VerifyOtpRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Verify the emailed code and issue the first token pair."""
    result = await auth_service.verify_otp(body.email, body.otp)
    return _auth_payload("Email verified successfully", result)


@router.post("/resend-otp")
async def resend_otp(
    body: ResendOtpRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    await auth_service.resend_otp(body.email, body.type.value)
    return success_response("OTP has been resent successfully")


@router.post("/refresh")
async def refresh_token(
    body: RefreshTokenRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Rotate a refresh token into a new token pair."""
    result = await auth_service.refresh(body.refreshToken)
    return _auth_payload("Token refreshed successfully", result)


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    Request a password reset code.

    Always returns the same acknowledgment to prevent email enumeration.
    """
    message = await auth_service.forgot_password(body.email)
    return success_response(message)


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Reset the password with the emailed code. Logs out every device."""
    await auth_service.reset_password(
        email=body.email,
        code=body.otp,
        new_password=body.newPassword,
        confirm_password=body.confirmPassword,
    )
    return success_response("Password reset successfully")


@router.get("/profile")
async def get_profile(
    account: Annotated[Account, Depends(require_auth)],
):
    return success_response(
        "Profile retrieved successfully",
        user=account.to_summary(include_timestamps=True),
    )


@router.patch("/profile")
async def update_profile(
    body: UpdateAccountRequest,
    account: Annotated[Account, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Update name, email and phone. A new email must be verified again."""
    updated = await profile_service.update_account(
        account.id,
        first_name=body.firstName,
        last_name=body.lastName,
        email=body.email,
        phone=body.phone,
    )
    return success_response(
        "Profile updated successfully",
        user=updated.to_summary(include_timestamps=True),
    )


@router.post("/logout")
async def logout(
    account: Annotated[Account, Depends(require_auth)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    body: Optional[LogoutRequest] = None,
):
    """
    Logout.

    With a refresh token only that session ends; without one every
    session of the account ends.
    """
    await auth_service.logout(account, body.refreshToken if body else None)
    return success_response("Logged out successfully")
