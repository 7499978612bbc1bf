"""Telegram chat link database table model."""

from sqlalchemy import BigInteger, Column, String
from sqlmodel import Field

from src.taskflow.entities.core._base import EntityTable


class TelegramLinkTable(EntityTable, table=True):
    """One row per linked Telegram user."""

    telegram_user_id: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )
    chat_id: int = Field(sa_column=Column(BigInteger, nullable=False))
