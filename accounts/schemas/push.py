"""
Pydantic models for push notification requests.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class PushTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Expo push token")
    platform: str = Field(..., description="android | ios | web")


class PushTestRequest(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
