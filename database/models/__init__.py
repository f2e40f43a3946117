"""Database models. Importing this package registers every table on Base.metadata."""

from database.models.persons import Person
from database.models.jobs import Job
from database.models.applications import Application
from database.models.contracts import Contract, ContractStatus
from database.models.chats import Chat, ChatParticipant, Message, application_topic

__all__ = [
    "Person",
    "Job",
    "Application",
    "Contract",
    "ContractStatus",
    "Chat",
    "ChatParticipant",
    "Message",
    "application_topic",
]
