"""Unit tests for the Expo push client and PushService."""

import json
import pytest
import httpx

from accounts.errors import InternalError, NotFoundError, ValidationError
from accounts.models import Account, PushToken
from accounts.services.push_service import ExpoPushClient, PushDeliveryError, PushService


def expo_transport(requests, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        messages = json.loads(request.content)
        requests.append((request, messages))
        tickets = [{"status": "ok", "id": f"ticket-{i}"} for i in range(len(messages))]
        return httpx.Response(status_code, json={"data": tickets})
    return httpx.MockTransport(handler)


@pytest.fixture
def sent():
    return []


@pytest.fixture
def push_client(sent):
    return ExpoPushClient(
        push_url="https://expo.test/push",
        access_token="expo-token",
        http_client=httpx.AsyncClient(transport=expo_transport(sent)),
    )


@pytest.fixture
def push_service(repository, push_client):
    return PushService(repository=repository, push_client=push_client)


@pytest.fixture
def account_id(repository):
    account = Account(
        id="65f000000000000000000001",
        firstName="Amina",
        lastName="Otieno",
        email="amina@tamu.com",
        password="hash",
    )
    repository.accounts[account.id] = account
    return account.id


class TestExpoPushClient:
    @pytest.mark.asyncio
    async def test_message_shape_and_headers(self, push_client, sent):
        result = await push_client.send(["ExponentPushToken[a]"], title="Hi", body="There", data={"k": "v"})

        request, messages = sent[0]
        assert str(request.url) == "https://expo.test/push"
        assert request.headers["Authorization"] == "Bearer expo-token"
        assert messages == [{
            "to": "ExponentPushToken[a]",
            "sound": "default",
            "title": "Hi",
            "body": "There",
            "data": {"k": "v"},
            "priority": "high",
        }]
        assert result["data"][0]["status"] == "ok"

    @pytest.mark.asyncio
    async def test_batches_of_one_hundred(self, push_client, sent):
        tokens = [f"ExponentPushToken[{i}]" for i in range(150)]

        result = await push_client.send(tokens, title="Hi")

        assert [len(messages) for _, messages in sent] == [100, 50]
        assert len(result["data"]) == 150

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = ExpoPushClient(
            http_client=httpx.AsyncClient(transport=expo_transport([], status_code=500)),
        )
        with pytest.raises(PushDeliveryError):
            await client.send(["ExponentPushToken[a]"])

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = ExpoPushClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        with pytest.raises(PushDeliveryError):
            await client.send(["ExponentPushToken[a]"])


class TestRegisterToken:
    @pytest.mark.asyncio
    async def test_one_token_per_platform(self, push_service, repository, account_id):
        await push_service.register_token(account_id, "ExponentPushToken[old]", "ios")
        await push_service.register_token(account_id, "ExponentPushToken[android]", "android")
        await push_service.register_token(account_id, "ExponentPushToken[new]", "ios")

        tokens = {t.platform: t.token for t in repository.accounts[account_id].pushTokens}
        assert tokens == {"ios": "ExponentPushToken[new]", "android": "ExponentPushToken[android]"}

    @pytest.mark.asyncio
    async def test_requires_token_and_platform(self, push_service, account_id):
        with pytest.raises(ValidationError) as exc_info:
            await push_service.register_token(account_id, "", "ios")
        assert exc_info.value.message == "token and platform are required"

    @pytest.mark.asyncio
    async def test_unknown_platform(self, push_service, account_id):
        with pytest.raises(ValidationError) as exc_info:
            await push_service.register_token(account_id, "ExponentPushToken[a]", "blackberry")
        assert exc_info.value.message == "platform must be one of android, ios, web"

    @pytest.mark.asyncio
    async def test_unknown_account(self, push_service, sample_user_id):
        with pytest.raises(NotFoundError):
            await push_service.register_token(sample_user_id, "ExponentPushToken[a]", "web")


class TestSendTestPush:
    @pytest.mark.asyncio
    async def test_sends_to_every_registered_device(self, push_service, repository, account_id, sent):
        repository.accounts[account_id].pushTokens = [
            PushToken(token="ExponentPushToken[a]", platform="ios"),
            PushToken(token="ExponentPushToken[b]", platform="android"),
        ]

        result = await push_service.send_test_push(account_id)

        _, messages = sent[0]
        assert [m["to"] for m in messages] == ["ExponentPushToken[a]", "ExponentPushToken[b]"]
        assert messages[0]["title"] == "TAMU Test"
        assert len(result["data"]) == 2

    @pytest.mark.asyncio
    async def test_no_tokens(self, push_service, account_id):
        with pytest.raises(ValidationError) as exc_info:
            await push_service.send_test_push(account_id)
        assert exc_info.value.code == "NO_PUSH_TOKENS"

    @pytest.mark.asyncio
    async def test_delivery_failure(self, repository, account_id):
        repository.accounts[account_id].pushTokens = [
            PushToken(token="ExponentPushToken[a]", platform="ios"),
        ]
        failing = ExpoPushClient(
            http_client=httpx.AsyncClient(transport=expo_transport([], status_code=400)),
        )
        service = PushService(repository=repository, push_client=failing)

        with pytest.raises(InternalError) as exc_info:
            await service.send_test_push(account_id, title="Hello")
        assert exc_info.value.code == "PUSH_FAILED"
