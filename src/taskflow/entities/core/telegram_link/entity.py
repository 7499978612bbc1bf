"""Telegram chat link domain entity."""

from pydantic import Field

from src.taskflow.entities.core._base import Entity


class TelegramLink(Entity):
    """Chat the bot may message on behalf of a Telegram user."""

    telegram_user_id: str = Field(description="Telegram user id of the sender")
    chat_id: int = Field(description="Chat to deliver notifications to")
