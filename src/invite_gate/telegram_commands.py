"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str
    admin_only: bool = False


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Register with an invite link")
    NAME = TelegramCommand("name", "Set your first and last name")
    HELP = TelegramCommand("help", "List available commands")
    INVITE = TelegramCommand("invite", "Generate a new invite link", admin_only=True)
    TOKEN = TelegramCommand("token", "Show the active invite link", admin_only=True)
    REVOKE = TelegramCommand("revoke", "Deactivate all invite links", admin_only=True)
    PROMOTE = TelegramCommand("promote", "Grant admin rights", admin_only=True)
    DEMOTE = TelegramCommand("demote", "Revoke admin rights", admin_only=True)

    @classmethod
    def lookup(cls, name: str) -> "BotCommand | None":
        """Return the command with the given name, if defined."""
        for entry in cls:
            if entry.value.command == name:
                return entry
        return None


def telegram_commands() -> list[dict[str, str]]:
    """Return public commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
        if not entry.value.admin_only
    ]


def parse_command(text: str) -> tuple[str, list[str]] | None:
    """Split ``/command@bot arg1 arg2`` into the command name and arguments."""
    parts = text.strip().split()
    if not parts or not parts[0].startswith("/"):
        return None
    name = parts[0][1:].split("@", maxsplit=1)[0].lower()
    if not name:
        return None
    return name, parts[1:]


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
