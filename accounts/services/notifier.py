"""
Fire-and-forget notifications.

Each send runs as a detached asyncio task. The caller gets the task back
but never has to await it; failures end up in the log and nowhere else.
``drain()`` waits for whatever is still in flight (used at shutdown and
in tests).
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

from accounts.models import Account, OtpChallenge, OtpPurpose
from accounts.services.email_service import EmailService
from accounts.services.push_service import ExpoPushClient
from config.push_config import PUSH_DEFAULTS

logger = logging.getLogger(__name__)


class Notifier:
    """
    Schedules OTP, welcome and push notifications in the background.
    """

    def __init__(
        self,
        email_service: EmailService,
        push_client: Optional[ExpoPushClient] = None,
        otp_expire_minutes: int = 10,
    ):
        self._email_service = email_service
        self._push_client = push_client
        self._otp_expire_minutes = otp_expire_minutes
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _spawn(self, coro: Awaitable, description: str) -> asyncio.Task:
        task = asyncio.create_task(self._run(coro, description))
        # Keep a reference until done; the loop only holds weak ones
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Awaitable, description: str) -> None:
        try:
            result = await coro
        except asyncio.CancelledError:
            logger.warning(f"Notification cancelled: {description}")
            raise
        except Exception:
            logger.exception(f"Notification failed: {description}")
            return

        if isinstance(result, dict) and not result.get("success", True):
            logger.error(f"Notification failed: {description}: {result.get('error')}")

    def send_otp(self, account: Account, challenge: OtpChallenge) -> asyncio.Task:
        """Email the challenge code, worded for its purpose."""
        if challenge.type == OtpPurpose.PASSWORD_RESET.value:
            coro = self._email_service.send_password_reset_email(
                to_email=account.email,
                first_name=account.firstName,
                otp_code=challenge.code,
                expiry_minutes=self._otp_expire_minutes,
            )
        else:
            coro = self._email_service.send_otp_verification_email(
                to_email=account.email,
                first_name=account.firstName,
                otp_code=challenge.code,
                expiry_minutes=self._otp_expire_minutes,
            )
        return self._spawn(coro, f"{challenge.type} email to account {account.id}")

    def send_welcome(self, account: Account) -> asyncio.Task:
        """Welcome email, plus a welcome push to any registered devices."""
        return self._spawn(self._welcome(account), f"welcome to account {account.id}")

    async def _welcome(self, account: Account) -> None:
        result = await self._email_service.send_welcome_email(
            to_email=account.email,
            first_name=account.firstName,
        )
        if not result.get("success"):
            logger.error(f"Welcome email failed for account {account.id}: {result.get('error')}")

        tokens = [entry.token for entry in account.pushTokens]
        if self._push_client is not None and tokens:
            await self._push_client.send(
                tokens,
                title=PUSH_DEFAULTS["welcome_title"],
                body=PUSH_DEFAULTS["welcome_body"],
                data={"type": "welcome"},
            )

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight notifications to finish."""
        if not self._tasks:
            return
        pending = list(self._tasks)
        logger.info(f"Waiting for {len(pending)} pending notification(s)")
        done, not_done = await asyncio.wait(pending, timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            logger.warning(f"Cancelled {len(not_done)} notification(s) still pending after {timeout}s")
