"""Relay of free text to the operators' notification channel."""

from fastapi import APIRouter, BackgroundTasks, status

from api.dependencies import NotifierDep
from api.schemas.chats import NotificationRequest
from core.integrations.notifications import push_quietly
from core.utils.validators import MAX_MESSAGE_LENGTH, require_text

router = APIRouter()


@router.post(
    "/notifications",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Push Notification",
)
async def push_notification(
    request: NotificationRequest,
    background_tasks: BackgroundTasks,
    notifier: NotifierDep,
):
    text = require_text("text", request.text, max_length=MAX_MESSAGE_LENGTH)
    background_tasks.add_task(push_quietly, notifier, text)
    return {"status": "accepted"}
