"""Account database table model."""

from sqlalchemy import Column, String, Text
from sqlmodel import Field

from src.taskflow.entities.core._base import EntityTable


class AccountTable(EntityTable, table=True):
    """Database persistence model for accounts.

    The unique index on ``telegram_user_id`` is the external-identity index.
    Both lookups live on one row, so they are written together or not at all.
    """

    telegram_user_id: str | None = Field(
        default=None,
        sa_column=Column(String(64), nullable=True, unique=True, index=True),
    )
    role: str = Field(
        default="pending",
        sa_column=Column(String(16), nullable=False, server_default="pending"),
    )
    full_name: str | None = Field(default=None, sa_column=Column(String(256)))
    username: str | None = Field(default=None, sa_column=Column(String(64)))
    photo_url: str | None = Field(default=None, sa_column=Column(Text))
