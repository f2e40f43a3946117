"""Chat endpoints."""

from fastapi import APIRouter, Path, status

from api.dependencies import CurrentPerson, DatabaseDep
from api.schemas.chats import PostMessageRequest
from api.services import chats as chat_service

router = APIRouter(prefix="/chats")


@router.get("", summary="List My Chats")
async def list_chats(current_person: CurrentPerson, db: DatabaseDep):
    return await chat_service.list_chats(db, current_person.id)


@router.get("/{chat_id}", summary="Get Chat")
async def get_chat(
    current_person: CurrentPerson,
    db: DatabaseDep,
    chat_id: str = Path(..., description="Chat ID"),
):
    """Chat with its messages, oldest first."""
    return await chat_service.get_chat(db, current_person.id, chat_id)


@router.post(
    "/{chat_id}/messages",
    status_code=status.HTTP_201_CREATED,
    summary="Post Message",
    description="Post a message. Only chat participants may post.",
)
async def post_message(
    request: PostMessageRequest,
    current_person: CurrentPerson,
    db: DatabaseDep,
    chat_id: str = Path(..., description="Chat ID"),
):
    return await chat_service.post_message(db, current_person.id, chat_id, request.text)
