"""Outbound account representation shared by the API and the CLI."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.taskflow.core.models.identifiers import encode_public_id
from src.taskflow.entities.core.account import Account


class AccountView(BaseModel):
    """Account as presented to clients.

    ``id`` is the public identifier; ``fullName`` falls back to the username
    and then to the public id so clients always have something to display.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    role: str
    telegram_user_id: str | None = Field(default=None, alias="telegramUserId")
    full_name: str = Field(alias="fullName")
    username: str | None = None
    photo_url: str | None = Field(default=None, alias="photoUrl")
    internal_id: str = Field(alias="internalId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_account(cls, account: Account) -> "AccountView":
        public_id = encode_public_id(account)
        return cls(
            id=public_id,
            role=account.role.value,
            telegram_user_id=account.telegram_user_id,
            full_name=account.full_name or account.username or public_id,
            username=account.username,
            photo_url=account.photo_url,
            internal_id=account.id,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
