"""Unit tests for background notification delivery."""

import asyncio
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from accounts.models import Account, OtpChallenge, OtpPurpose, PushToken
from accounts.services.notifier import Notifier


@pytest.fixture
def email_service():
    service = MagicMock()
    service.send_otp_verification_email = AsyncMock(return_value={"success": True})
    service.send_password_reset_email = AsyncMock(return_value={"success": True})
    service.send_welcome_email = AsyncMock(return_value={"success": True})
    return service


@pytest.fixture
def push_client():
    client = MagicMock()
    client.send = AsyncMock(return_value={"data": [{"status": "ok"}]})
    return client


@pytest.fixture
def account(sample_user_id):
    return Account(
        id=sample_user_id,
        firstName="Amina",
        lastName="Otieno",
        email="amina@tamu.com",
        password="hash",
    )


def challenge(purpose):
    return OtpChallenge(code="123456", expiresAt=datetime.now(timezone.utc), type=purpose)


class TestSendOtp:
    @pytest.mark.asyncio
    async def test_verification_code_uses_verification_email(self, email_service, account):
        notifier = Notifier(email_service, otp_expire_minutes=15)

        notifier.send_otp(account, challenge(OtpPurpose.EMAIL_VERIFICATION))
        await notifier.drain()

        email_service.send_otp_verification_email.assert_awaited_once_with(
            to_email="amina@tamu.com",
            first_name="Amina",
            otp_code="123456",
            expiry_minutes=15,
        )
        email_service.send_password_reset_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset_code_uses_reset_email(self, email_service, account):
        notifier = Notifier(email_service)

        notifier.send_otp(account, challenge(OtpPurpose.PASSWORD_RESET))
        await notifier.drain()

        email_service.send_password_reset_email.assert_awaited_once()
        email_service.send_otp_verification_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_does_not_block_the_caller(self, email_service, account):
        release = asyncio.Event()

        async def slow_send(**kwargs):
            await release.wait()
            return {"success": True}

        email_service.send_otp_verification_email = slow_send
        notifier = Notifier(email_service)

        notifier.send_otp(account, challenge(OtpPurpose.EMAIL_VERIFICATION))
        assert notifier.pending == 1

        release.set()
        await notifier.drain()
        assert notifier.pending == 0


class TestSendWelcome:
    @pytest.mark.asyncio
    async def test_welcome_email_and_push(self, email_service, push_client, account):
        account.pushTokens = [PushToken(token="ExponentPushToken[abc]", platform="ios")]
        notifier = Notifier(email_service, push_client=push_client)

        notifier.send_welcome(account)
        await notifier.drain()

        email_service.send_welcome_email.assert_awaited_once_with(
            to_email="amina@tamu.com", first_name="Amina",
        )
        push_client.send.assert_awaited_once()
        assert push_client.send.await_args.args[0] == ["ExponentPushToken[abc]"]

    @pytest.mark.asyncio
    async def test_no_push_without_tokens(self, email_service, push_client, account):
        notifier = Notifier(email_service, push_client=push_client)

        notifier.send_welcome(account)
        await notifier.drain()

        push_client.send.assert_not_awaited()


class TestFailures:
    @pytest.mark.asyncio
    async def test_exceptions_are_logged_not_raised(self, email_service, account, caplog):
        email_service.send_welcome_email = AsyncMock(side_effect=RuntimeError("smtp down"))
        notifier = Notifier(email_service)

        task = notifier.send_welcome(account)
        await notifier.drain()

        assert task.done() and task.exception() is None
        assert "Notification failed" in caplog.text

    @pytest.mark.asyncio
    async def test_unsuccessful_result_is_logged(self, email_service, account, caplog):
        email_service.send_otp_verification_email = AsyncMock(
            return_value={"success": False, "error": "rejected"}
        )
        notifier = Notifier(email_service)

        notifier.send_otp(account, challenge(OtpPurpose.EMAIL_VERIFICATION))
        await notifier.drain()

        assert "rejected" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_cancels_after_timeout(self, email_service, account):
        async def never_finishes(**kwargs):
            await asyncio.Event().wait()

        email_service.send_otp_verification_email = never_finishes
        notifier = Notifier(email_service)

        task = notifier.send_otp(account, challenge(OtpPurpose.EMAIL_VERIFICATION))
        await notifier.drain(timeout=0.05)
        await asyncio.sleep(0.01)

        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self, email_service):
        await Notifier(email_service).drain()
