"""Pydantic models for Telegram webhook payloads."""

from pydantic import BaseModel, Field


class TelegramUser(BaseModel):
    """Telegram user payload."""

    id: int
    is_bot: bool | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None


class TelegramChat(BaseModel):
    """Telegram chat payload."""

    id: int
    type: str


class TelegramMessage(BaseModel):
    """Telegram message payload."""

    message_id: int
    date: int
    chat: TelegramChat
    from_user: TelegramUser = Field(alias="from")
    text: str | None = None


class TelegramUpdate(BaseModel):
    """Telegram update payload; only messages are routed."""

    update_id: int
    message: TelegramMessage | None = None
