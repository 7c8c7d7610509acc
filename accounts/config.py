"""
Tamu accounts API settings.

Extends the base settings with account-specific configuration.
"""

from typing import Optional
from common.config import BaseAppSettings
from config.push_config import EXPO_PUSH_URL as DEFAULT_EXPO_PUSH_URL


class Settings(BaseAppSettings):
    """Accounts-specific settings."""

    # ==========================================================================
    # OTP / Passwords
    # ==========================================================================
    OTP_LENGTH: int = 6
    OTP_EXPIRE_MINUTES: int = 10
    BCRYPT_ROUNDS: int = 12

    # ==========================================================================
    # Email Settings (OTP codes, password reset, welcome)
    # ==========================================================================
    EMAIL_MODE: str = "console"  # console, smtp, resend
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM_ADDRESS: str = "noreply@tamu.com"
    EMAIL_FROM_NAME: str = "Tamu"
    EMAIL_TEAM_NAME: str = "Tamu Team"

    # ==========================================================================
    # Push Notifications (Expo)
    # ==========================================================================
    EXPO_PUSH_URL: str = DEFAULT_EXPO_PUSH_URL
    EXPO_ACCESS_TOKEN: Optional[str] = None

    # ==========================================================================
    # Profile photo uploads
    # ==========================================================================
    UPLOAD_DIR: str = "uploads/profile-photos"
    UPLOAD_URL_PREFIX: str = "/uploads/profile-photos"
    MAX_PHOTO_BYTES: int = 5 * 1024 * 1024


# Global settings instance
settings = Settings()
