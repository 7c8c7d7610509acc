"""
FastAPI router for push notification endpoints.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from accounts.dependencies import get_push_service, require_auth
from accounts.models import Account
from accounts.schemas.push import PushTokenRequest, PushTestRequest
from accounts.services.push_service import PushService
from common.utils import success_response

router = APIRouter(prefix="/push", tags=["push"])


@router.post("/push-token")
async def register_push_token(
    body: PushTokenRequest,
    account: Annotated[Account, Depends(require_auth)],
    push_service: Annotated[PushService, Depends(get_push_service)],
):
    """Register or update the Expo push token for one platform."""
    await push_service.register_token(account.id, body.token, body.platform)
    return success_response("Push token registered")


@router.post("/push-test")
async def send_test_push(
    account: Annotated[Account, Depends(require_auth)],
    push_service: Annotated[PushService, Depends(get_push_service)],
    body: Optional[PushTestRequest] = None,
):
    """Send a test push to every device registered for the account."""
    body = body or PushTestRequest()
    result = await push_service.send_test_push(
        account.id,
        title=body.title,
        body=body.body,
        data=body.data,
    )
    return success_response("Test push sent", result=result)
