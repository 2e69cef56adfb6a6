"""Telegram API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a text message to a Telegram chat."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a message using Telegram's sendMessage API."""
        await self._call("sendMessage", {"chat_id": chat_id, "text": text})

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._call("setMyCommands", {"commands": commands})

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""
        await self._call(
            "setChatMenuButton", {"menu_button": menu_button or {"type": "commands"}}
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _call(self, method: str, payload: dict[str, object]) -> None:
        url = f"{TELEGRAM_API_URL}/bot{self.bot_token}/{method}"
        response = await self.http_client.post(url, json=payload, timeout=self.timeout)
        response.raise_for_status()
