"""
One-time passcode helpers.

Codes are drawn from ``secrets`` so every digit is uniform and leading
zeros are kept.
"""

import secrets
from datetime import datetime, timedelta, timezone

from accounts.models import OtpChallenge, OtpPurpose


def generate_otp(length: int = 6) -> str:
    """Return ``length`` random decimal digits."""
    if length < 1:
        raise ValueError("OTP length must be positive")
    return "".join(secrets.choice("0123456789") for _ in range(length))


def otp_expiry(minutes: int = 10) -> datetime:
    """Instant ``minutes`` from now (UTC)."""
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


def is_otp_expired(expires_at: datetime) -> bool:
    # Naive datetimes from older documents are stored as UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)


def new_challenge(purpose: OtpPurpose, length: int = 6, minutes: int = 10) -> OtpChallenge:
    """Fresh challenge that replaces whatever the account had pending."""
    return OtpChallenge(
        code=generate_otp(length),
        expiresAt=otp_expiry(minutes),
        type=purpose,
    )


def codes_match(submitted: str, expected: str) -> bool:
    return secrets.compare_digest(str(submitted).encode("utf-8"), str(expected).encode("utf-8"))
