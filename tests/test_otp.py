"""Unit tests for OTP helpers."""

import pytest
from datetime import datetime, timedelta, timezone

from accounts.models import OtpPurpose
from accounts.services.otp import (
    codes_match,
    generate_otp,
    is_otp_expired,
    new_challenge,
    otp_expiry,
)


class TestGenerateOtp:
    def test_default_length_is_six_digits(self):
        code = generate_otp()
        assert len(code) == 6
        assert code.isdigit()

    def test_custom_length(self):
        assert len(generate_otp(8)) == 8

    def test_codes_vary(self):
        codes = {generate_otp() for _ in range(50)}
        assert len(codes) > 1

    def test_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            generate_otp(0)


class TestExpiry:
    def test_expiry_is_in_the_future(self):
        before = datetime.now(timezone.utc)
        expires_at = otp_expiry(10)
        assert timedelta(minutes=9) < expires_at - before <= timedelta(minutes=10, seconds=5)

    def test_past_instant_is_expired(self):
        assert is_otp_expired(datetime.now(timezone.utc) - timedelta(seconds=1))

    def test_future_instant_is_not_expired(self):
        assert not is_otp_expired(datetime.now(timezone.utc) + timedelta(minutes=1))

    def test_naive_datetime_is_read_as_utc(self):
        naive_past = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)
        assert is_otp_expired(naive_past)


class TestChallenge:
    def test_new_challenge_carries_purpose(self):
        challenge = new_challenge(OtpPurpose.PASSWORD_RESET, length=4, minutes=5)

        assert challenge.type == "password_reset"
        assert len(challenge.code) == 4
        assert not is_otp_expired(challenge.expiresAt)

    def test_codes_match(self):
        assert codes_match("012345", "012345")
        assert not codes_match("012345", "12345")
        assert not codes_match("", "012345")
