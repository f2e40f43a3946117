"""Chat service functions.

Chats are addressed by topic. Application chats are opened when the
application is filed and receive a system message on every contract move.
"""

from typing import Any, Iterable, Optional
import logging

from sqlalchemy import select

from core.errors import insufficient_rights, not_found
from core.utils.formatting import format_datetime
from core.utils.validators import MAX_MESSAGE_LENGTH, require_text
from core.security import new_id
from database.engine import Database
from database.models.applications import Application
from database.models.chats import (
    APPLICATION_TOPIC_PREFIX,
    Chat,
    ChatParticipant,
    Message,
)
from database.models.contracts import Contract
from database.models.persons import Person

logger = logging.getLogger(__name__)


# ==================== Serialization ===================== #

def message_to_dict(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "chat_id": message.chat_id,
        "created_by": message.created_by,
        "author_name": message.author.display_name if message.author else None,
        "text": message.text,
        "created_at": format_datetime(message.created_at),
    }


def participant_to_dict(participant: ChatParticipant) -> dict[str, Any]:
    person = participant.person
    return {
        "id": participant.person_id,
        "display_name": person.display_name if person else None,
        "ethereum_address": person.ethereum_address if person else None,
    }


async def _messages(session, chat_id: str) -> list[Message]:
    result = await session.execute(
        select(Message)
        .where(Message.chat_id == chat_id)
        .order_by(Message.created_at, Message.id)
    )
    return list(result.scalars().all())


async def chat_to_dict(session, chat: Chat) -> dict[str, Any]:
    messages = await _messages(session, chat.id)
    return {
        "id": chat.id,
        "topic": chat.topic,
        "created_at": format_datetime(chat.created_at),
        "participants": [participant_to_dict(p) for p in chat.participants],
        "messages": [message_to_dict(m) for m in messages],
    }


# ==================== Building blocks ===================== #

async def find_chat_by_topic(session, topic: str) -> Optional[Chat]:
    result = await session.execute(select(Chat).where(Chat.topic == topic))
    return result.scalar_one_or_none()


async def ensure_chat(session, topic: str, participants: Iterable[Person]) -> Chat:
    """
    Return the chat for `topic`, creating it when missing.

    Every person in `participants` ends up enrolled exactly once.
    """
    chat = await find_chat_by_topic(session, topic)
    if chat is None:
        chat = Chat(id=new_id(), topic=topic, participants=[])
        session.add(chat)
        logger.info(f"Chat {chat.id} opened for {topic}")

    enrolled = {p.person_id for p in chat.participants}
    for person in participants:
        if person.id not in enrolled:
            chat.participants.append(ChatParticipant(person_id=person.id, person=person))
            enrolled.add(person.id)

    await session.flush()
    return chat


async def add_message(session, chat: Chat, author: Person, text: str) -> Message:
    """Append a message to a chat inside the caller's transaction."""
    message = Message(chat_id=chat.id, created_by=author.id, author=author, text=text)
    session.add(message)
    await session.flush()
    return message


def is_participant(chat: Chat, person_id: str) -> bool:
    return any(p.person_id == person_id for p in chat.participants)


# ==================== Operations ===================== #

async def post_message(
    db: Database,
    actor_id: str,
    chat_id: str,
    text: Optional[str],
) -> dict[str, Any]:
    """
    Post a message to a chat the actor participates in.

    Args:
        db: Database handle
        actor_id: Author
        chat_id: Target chat
        text: Message text, trimmed, 1 to 4096 code points

    Returns:
        Created message
    """
    text = require_text("text", text, max_length=MAX_MESSAGE_LENGTH)

    async with db.transaction() as session:
        chat = await session.get(Chat, chat_id)
        if chat is None:
            raise not_found()
        if not is_participant(chat, actor_id):
            raise insufficient_rights()

        author = await session.get(Person, actor_id)
        message = await add_message(session, chat, author, text)
        return message_to_dict(message)


async def get_chat(db: Database, actor_id: str, chat_id: str) -> dict[str, Any]:
    """Chat with its messages. Non-participants get not found."""
    async with db.transaction(read_only=True) as session:
        chat = await session.get(Chat, chat_id)
        if chat is None or not is_participant(chat, actor_id):
            raise not_found()
        return await chat_to_dict(session, chat)


async def list_chats(db: Database, actor_id: str) -> list[dict[str, Any]]:
    """
    Chats the actor participates in.

    Application chats are annotated with the job title and the ids of the
    job, application and contract they belong to.
    """
    async with db.transaction(read_only=True) as session:
        result = await session.execute(
            select(Chat)
            .join(ChatParticipant, ChatParticipant.chat_id == Chat.id)
            .where(ChatParticipant.person_id == actor_id)
            .order_by(Chat.created_at.desc())
        )
        chats = result.scalars().unique().all()

        items = []
        for chat in chats:
            item = {
                "id": chat.id,
                "topic": chat.topic,
                "kind": "generic",
                "title": None,
                "job_id": None,
                "application_id": None,
                "contract_id": None,
                "created_at": format_datetime(chat.created_at),
                "participants": [participant_to_dict(p) for p in chat.participants],
            }
            if chat.topic.startswith(APPLICATION_TOPIC_PREFIX):
                application_id = chat.topic[len(APPLICATION_TOPIC_PREFIX):]
                application = await session.get(Application, application_id)
                if application is not None:
                    contract_id = await session.scalar(
                        select(Contract.id).where(Contract.application_id == application.id)
                    )
                    item.update(
                        kind="application",
                        title=application.job.title,
                        job_id=application.job_id,
                        application_id=application.id,
                        contract_id=contract_id,
                    )
            items.append(item)
        return items
