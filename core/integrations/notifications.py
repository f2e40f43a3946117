"""
Notification pusher (Telegram Bot API).

Pushing is best effort: callers schedule it after their own work is done and
a failed push never undoes anything.
"""

import asyncio
import logging
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class NotificationError(Exception):
    """Raised when one or more chats could not be notified."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class Notifier(Protocol):
    async def push(self, text: str) -> None:
        ...

    async def close(self) -> None:
        ...


class NullNotifier:
    """Notifier used when no bot token is configured."""

    async def push(self, text: str) -> None:
        logger.debug("Notification dropped, notifier is not configured")

    async def close(self) -> None:
        return None


def escape_markdown_code(text: str) -> str:
    """Escape text for a MarkdownV2 pre-formatted block."""
    return text.replace("\\", "\\\\").replace("`", "\\`")


class TelegramNotifier:
    """Sends every message to each configured chat."""

    def __init__(
        self,
        token: str,
        chat_ids: list[int],
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
        api_url: str = TELEGRAM_API_URL,
    ):
        self.chat_ids = list(chat_ids)
        self._endpoint = f"{api_url}/bot{token}/sendMessage"
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def push(self, text: str) -> None:
        """
        Send text to all chats, continuing past failures.

        Raises:
            NotificationError: listing every chat that failed
        """
        body = "```" + escape_markdown_code(text) + "```"
        errors: list[str] = []
        for chat_id in self.chat_ids:
            try:
                response = await self._client.post(
                    self._endpoint,
                    json={"chat_id": chat_id, "text": body, "parse_mode": "MarkdownV2"},
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                errors.append(f"chat {chat_id}: {e}")
        if errors:
            raise NotificationError(errors)

    async def close(self) -> None:
        await self._client.aclose()


def create_notifier(token: Optional[str], chat_ids: list[int], timeout: float = 5.0) -> Notifier:
    if not token or not chat_ids:
        return NullNotifier()
    return TelegramNotifier(token, chat_ids, timeout=timeout)


async def push_quietly(notifier: Notifier, text: str) -> None:
    """Push and log failures instead of raising them."""
    try:
        await notifier.push(text)
    except (NotificationError, httpx.HTTPError, asyncio.TimeoutError) as e:
        logger.warning(f"Notification failed: {e}")
