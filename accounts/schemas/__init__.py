"""Request schemas."""

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
from accounts.schemas.profile import (
    UpdateProfileRequest,
    SocialLinksRequest,
    ChangePasswordRequest,
)
from accounts.schemas.push import PushTokenRequest, PushTestRequest

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "GoogleSignInRequest",
    "VerifyOtpRequest",
    "ResendOtpRequest",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UpdateAccountRequest",
    "LogoutRequest",
    "UpdateProfileRequest",
    "SocialLinksRequest",
    "ChangePasswordRequest",
    "PushTokenRequest",
    "PushTestRequest",
]
