"""Chat and notification request schemas."""

from typing import Optional

from pydantic import BaseModel


class PostMessageRequest(BaseModel):
    text: Optional[str] = None


class NotificationRequest(BaseModel):
    text: Optional[str] = None
