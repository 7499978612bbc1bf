"""Telegram chat link repository."""

from sqlmodel import Session, select

from src.taskflow.entities.core._base import utc_now
from src.taskflow.entities.core.telegram_link.entity import TelegramLink
from src.taskflow.entities.core.telegram_link.table import TelegramLinkTable


class TelegramLinkRepository:
    """Data-access layer for chat links."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _get_row(self, telegram_user_id: str) -> TelegramLinkTable | None:
        statement = select(TelegramLinkTable).where(
            TelegramLinkTable.telegram_user_id == telegram_user_id
        )
        return self._session.exec(statement).first()

    def get(self, telegram_user_id: str) -> TelegramLink | None:
        row = self._get_row(telegram_user_id)
        if row is None:
            return None
        return TelegramLink.model_validate(row, from_attributes=True)

    def upsert(self, telegram_user_id: str, chat_id: int) -> TelegramLink:
        """Link (or relink) the user's chat."""
        row = self._get_row(telegram_user_id)
        if row is None:
            row = TelegramLinkTable(telegram_user_id=telegram_user_id, chat_id=chat_id)
        else:
            row.chat_id = chat_id
            row.updated_at = utc_now()
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return TelegramLink.model_validate(row, from_attributes=True)

    def remove(self, telegram_user_id: str) -> bool:
        """Delete the link. Returns whether one existed."""
        row = self._get_row(telegram_user_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
