"""
Pydantic models for auth request validation.

Defines schemas for registration, login, OTP, password reset and sessions.
"""

from typing import Optional
from pydantic import BaseModel, Field, EmailStr

from accounts.models import OtpPurpose

PHONE_PATTERN = r"^\+?[1-9]\d{0,15}$"


class RegisterRequest(BaseModel):
    """Request body for user registration."""
    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=1)
    confirmPassword: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Request body for login with email or phone."""
    emailOrPhone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class GoogleSignInRequest(BaseModel):
    idToken: str = Field(..., min_length=1, description="Google ID token from the client")


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)


class ResendOtpRequest(BaseModel):
    email: EmailStr
    type: OtpPurpose = OtpPurpose.EMAIL_VERIFICATION


class RefreshTokenRequest(BaseModel):
    refreshToken: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    """Request body for forgot password."""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request body for password reset with OTP."""
    email: EmailStr
    otp: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1)
    confirmPassword: str = Field(..., min_length=1)


class UpdateAccountRequest(BaseModel):
    """Request body for PATCH /auth/profile."""
    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class LogoutRequest(BaseModel):
    """Omit refreshToken to log out every device."""
    refreshToken: Optional[str] = None
