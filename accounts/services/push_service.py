"""
Expo push notifications.

``ExpoPushClient`` talks to the Expo push API; ``PushService`` manages the
per-platform device tokens stored on the account and the test push.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from accounts.errors import InternalError, NotFoundError, ValidationError
from accounts.models import Platform, PushToken
from accounts.services.account_store import AccountRepository
from config.push_config import EXPO_PUSH_URL, EXPO_MAX_BATCH_SIZE, PUSH_DEFAULTS

logger = logging.getLogger(__name__)


class PushDeliveryError(Exception):
    """Expo rejected the request or could not be reached."""


class ExpoPushClient:
    """
    Minimal Expo push API client.
    """

    def __init__(
        self,
        push_url: str = EXPO_PUSH_URL,
        access_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize ExpoPushClient.

        Args:
            push_url: Expo push endpoint
            access_token: Expo access token (only needed with enhanced push security)
            http_client: Shared client (one per call if omitted)
            timeout: Request timeout in seconds
        """
        self._push_url = push_url
        self._access_token = access_token
        self._http_client = http_client
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _post(self, messages: List[dict]) -> dict:
        try:
            if self._http_client is not None:
                response = await self._http_client.post(self._push_url, headers=self._headers(), json=messages)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._push_url, headers=self._headers(), json=messages)
        except httpx.HTTPError as e:
            raise PushDeliveryError(f"Expo push request failed: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = {"raw": response.text}

        if not response.is_success:
            raise PushDeliveryError(
                f"Expo push error: {response.status_code} {response.reason_phrase} - {payload}"
            )
        return payload

    async def send(
        self,
        tokens: List[str],
        title: Optional[str] = None,
        body: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        sound: Optional[str] = PUSH_DEFAULTS["sound"],
        priority: str = PUSH_DEFAULTS["priority"],
    ) -> dict:
        """
        Send one notification to each token.

        Returns:
            Expo response; ``data`` holds one ticket per token across batches

        Raises:
            PushDeliveryError: Non-2xx response or transport failure
        """
        messages = [
            {
                "to": token,
                "sound": sound,
                "title": title,
                "body": body,
                "data": data or {},
                "priority": priority,
            }
            for token in tokens
        ]

        tickets: List[Any] = []
        for start in range(0, len(messages), EXPO_MAX_BATCH_SIZE):
            result = await self._post(messages[start:start + EXPO_MAX_BATCH_SIZE])
            batch_tickets = result.get("data", [])
            if isinstance(batch_tickets, list):
                tickets.extend(batch_tickets)
            else:
                tickets.append(batch_tickets)

        logger.info(f"Push sent to {len(tokens)} device(s)")
        return {"data": tickets}


class PushService:
    """
    Device token registration and test pushes.
    """

    def __init__(self, repository: AccountRepository, push_client: ExpoPushClient):
        self._repository = repository
        self._push_client = push_client

    async def register_token(self, account_id: str, token: str, platform: str) -> None:
        """
        Register or replace the Expo token for one platform.

        Raises:
            ValidationError: Missing token/platform or unknown platform
            NotFoundError: Account no longer exists
        """
        if not token or not platform:
            raise ValidationError("token and platform are required")
        try:
            platform_value = Platform(platform)
        except ValueError:
            raise ValidationError("platform must be one of android, ios, web")

        updated = await self._repository.upsert_push_token(
            account_id,
            PushToken(token=token, platform=platform_value),
        )
        if not updated:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        logger.info(f"Push token registered for account {account_id} ({platform_value.value})")

    async def send_test_push(
        self,
        account_id: str,
        title: Optional[str] = None,
        body: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> dict:
        account = await self._repository.find_by_id(account_id)
        if not account:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        tokens = [entry.token for entry in account.pushTokens]
        if not tokens:
            raise ValidationError("No push tokens registered for user", code="NO_PUSH_TOKENS")

        try:
            return await self._push_client.send(
                tokens,
                title=title or PUSH_DEFAULTS["test_title"],
                body=body or PUSH_DEFAULTS["test_body"],
                data=data or {},
            )
        except PushDeliveryError as e:
            logger.error(f"Test push failed for account {account_id}: {e}")
            raise InternalError("Failed to send test push", code="PUSH_FAILED")
