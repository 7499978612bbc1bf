"""Account repository for data access operations."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, col, select

from src.taskflow.entities.core._base import utc_now
from src.taskflow.entities.core.account.entity import Account, ProfileFields, Role
from src.taskflow.entities.core.account.table import AccountTable


class AccountRepository:
    """Data-access layer for accounts.

    Works inside the caller's session; committing is the caller's job.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, account_id: str) -> Account | None:
        row = self._session.get(AccountTable, account_id)
        if row is None:
            return None
        return Account.model_validate(row, from_attributes=True)

    def get_by_telegram_id(self, telegram_user_id: str) -> Account | None:
        statement = select(AccountTable).where(
            AccountTable.telegram_user_id == telegram_user_id
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Account.model_validate(row, from_attributes=True)

    def list_by_ids(self, account_ids: Iterable[str]) -> list[Account]:
        ids = list(account_ids)
        if not ids:
            return []
        statement = select(AccountTable).where(col(AccountTable.id).in_(ids))
        return [
            Account.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def list_by_telegram_ids(self, telegram_user_ids: Iterable[str]) -> list[Account]:
        ids = list(telegram_user_ids)
        if not ids:
            return []
        statement = select(AccountTable).where(
            col(AccountTable.telegram_user_id).in_(ids)
        )
        return [
            Account.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def create(self, account: Account) -> Account:
        """Insert the account and return it as stored.

        Raises:
            sqlalchemy.exc.IntegrityError: telegram_user_id is already mapped
        """
        row = AccountTable.model_validate(
            {**account.model_dump(), "role": account.role.value}
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Account.model_validate(row, from_attributes=True)

    def update_profile(
        self, account_id: str, profile: ProfileFields, now: datetime | None = None
    ) -> bool:
        """Overwrite only the non-empty incoming fields in a single statement.

        Returns:
            False when no account row matched
        """
        values = {**profile.present_fields(), "updated_at": now or utc_now()}
        statement = (
            update(AccountTable)
            .where(col(AccountTable.id) == account_id)
            .values(**values)
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def set_role_if_matches(
        self,
        account_id: str,
        expected_role: Role,
        new_role: Role,
        now: datetime | None = None,
    ) -> bool:
        """Compare-and-set the role. True only if this call changed the row."""
        statement = (
            update(AccountTable)
            .where(col(AccountTable.id) == account_id)
            .where(col(AccountTable.role) == expected_role.value)
            .values(role=new_role.value, updated_at=now or utc_now())
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1
