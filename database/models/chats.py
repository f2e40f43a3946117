"""
Chat Models

Topic-addressed threads, their participants and messages.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    BigInteger,
    Integer,
    DateTime,
    func,
    Text,
    Index,
)
from database.engine import Base, utc_now
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.persons import Person

APPLICATION_TOPIC_PREFIX = "urn:application:"


def application_topic(application_id: str) -> str:
    return f"{APPLICATION_TOPIC_PREFIX}{application_id}"


# ==================== Chat Models ===================== #
class Chat(Base):
    """A thread keyed by its topic."""

    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    topic: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    participants: Mapped[list["ChatParticipant"]] = relationship(
        back_populates="chat", lazy="selectin", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Chat(id={self.id}, topic={self.topic})>"


class ChatParticipant(Base):
    """Membership of a person in a chat."""

    __tablename__ = "chat_participants"

    chat_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True
    )
    person_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), primary_key=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    chat: Mapped["Chat"] = relationship(back_populates="participants")
    person: Mapped["Person"] = relationship(lazy="joined")


class Message(Base):
    """
    An immutable chat message.

    `id` is a database sequence and breaks ties between equal timestamps,
    which keeps the order consistent with commit order.
    """

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    chat_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    author: Mapped["Person"] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_messages_chat_created", "chat_id", "created_at"),
    )

    def __repr__(self):
        return f"<Message(id={self.id}, chat_id={self.chat_id})>"
