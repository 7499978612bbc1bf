"""Durable account store keyed by internal id and by Telegram identity."""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from enum import Enum

from loguru import logger
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from src.taskflow.core.errors import StorageUnavailableError
from src.taskflow.core.services.database.db_session import DbSessionService
from src.taskflow.entities.core.account import (
    Account,
    AccountRepository,
    ProfileFields,
    Role,
)


class RoleUpdateOutcome(str, Enum):
    """Result of a compare-and-set on an account's role."""

    SUCCESS = "success"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


class IdentityStore:
    """Account persistence with per-operation transactions.

    Every public method runs in its own transaction. Writes that race on the
    same key are settled by the database: the unique Telegram index for
    creation, a conditional UPDATE for role changes.
    """

    def __init__(self, database_service: DbSessionService):
        self._db = database_service

    @contextmanager
    def _repository(self) -> Iterator[AccountRepository]:
        try:
            with self._db.session_scope() as session:
                yield AccountRepository(session)
        except (OperationalError, InterfaceError) as exc:
            logger.error("Account storage unavailable: {}", type(exc).__name__)
            raise StorageUnavailableError(str(exc)) from exc

    def find_by_telegram_id(self, telegram_user_id: str) -> Account | None:
        with self._repository() as repo:
            return repo.get_by_telegram_id(telegram_user_id)

    def find_by_id(self, account_id: str) -> Account | None:
        with self._repository() as repo:
            return repo.get(account_id)

    def find_many(
        self, account_ids: Iterable[str], telegram_user_ids: Iterable[str]
    ) -> list[Account]:
        """Fetch accounts matching either list; one query per non-empty list."""
        with self._repository() as repo:
            return repo.list_by_ids(account_ids) + repo.list_by_telegram_ids(
                telegram_user_ids
            )

    def create_from_telegram(
        self, telegram_user_id: str, profile: ProfileFields
    ) -> Account:
        """Create a pending account mapped to ``telegram_user_id``.

        If another writer mapped the same identity first, that account is
        returned instead and nothing new is stored.
        """
        account = Account(
            telegram_user_id=telegram_user_id,
            role=Role.PENDING,
            **profile.present_fields(),
        )
        try:
            with self._repository() as repo:
                created = repo.create(account)
        except IntegrityError:
            logger.info("Concurrent account creation for telegram id {}", telegram_user_id)
            winner = self.find_by_telegram_id(telegram_user_id)
            if winner is None:
                raise
            return winner

        logger.info("Created account {} for telegram id {}", created.id, telegram_user_id)
        return created

    def create_account(self, profile: ProfileFields) -> Account:
        """Create a pending account with no external identity."""
        with self._repository() as repo:
            return repo.create(Account(role=Role.PENDING, **profile.present_fields()))

    def update_profile(self, account_id: str, profile: ProfileFields) -> Account | None:
        """Merge non-empty incoming fields over the stored ones; bumps updated_at.

        Returns:
            The stored account after the update, or None if it does not exist
        """
        with self._repository() as repo:
            if not repo.update_profile(account_id, profile):
                return None
            return repo.get(account_id)

    def set_role_if_matches(
        self, account_id: str, expected_role: Role, new_role: Role
    ) -> RoleUpdateOutcome:
        with self._repository() as repo:
            if repo.set_role_if_matches(account_id, expected_role, new_role):
                return RoleUpdateOutcome.SUCCESS
            if repo.get(account_id) is None:
                return RoleUpdateOutcome.NOT_FOUND
            return RoleUpdateOutcome.CONFLICT

