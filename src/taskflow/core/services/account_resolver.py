"""Resolve callers and public identifiers to accounts."""

from collections.abc import Iterable

from loguru import logger

from src.taskflow.core.errors import AccountNotFoundError, InvalidIdentifierError
from src.taskflow.core.models.identifiers import (
    AccountSelector,
    ExternalSelector,
    InternalSelector,
    decode_public_id,
    normalize_batch_ids,
    selector_for,
)
from src.taskflow.core.services.identity_store import IdentityStore
from src.taskflow.entities.core.account import Account, ProfileFields


class AccountResolver:
    def __init__(self, store: IdentityStore):
        self._store = store

    def resolve_or_create(self, telegram_user_id: str, profile: ProfileFields) -> Account:
        """Find the account for a Telegram identity, creating it on first sight.

        Known accounts get a non-destructive profile refresh (and a new
        ``updated_at``) on every sighting.
        """
        existing = self._store.find_by_telegram_id(telegram_user_id)
        if existing is not None:
            refreshed = self._store.update_profile(existing.id, profile)
            if refreshed is not None:
                return refreshed
            logger.warning("Account {} vanished during profile refresh", existing.id)

        return self._store.create_from_telegram(telegram_user_id, profile)

    def resolve_selector(self, selector: AccountSelector) -> Account | None:
        if isinstance(selector, ExternalSelector):
            return self._store.find_by_telegram_id(selector.telegram_user_id)
        return self._store.find_by_id(selector.account_id)

    def resolve_by_public_id(self, public_id: str) -> Account:
        """Resolve ``tg_<id>`` or an internal id.

        Raises:
            InvalidIdentifierError: the identifier is neither form
            AccountNotFoundError: no account carries it
        """
        selector = decode_public_id(public_id)
        if selector is None:
            raise InvalidIdentifierError(f"unrecognised public id {public_id!r}")

        account = self.resolve_selector(selector)
        if account is None:
            raise AccountNotFoundError(f"no account for {public_id!r}")
        return account

    def resolve_many(self, public_ids: str | Iterable[str] | None) -> list[Account]:
        """Batch lookup preserving the caller's order.

        Duplicates (case-insensitive) and identifiers that do not decode or
        do not resolve are dropped silently.
        """
        selectors: list[AccountSelector] = []
        for public_id in normalize_batch_ids(public_ids):
            selector = decode_public_id(public_id)
            if selector is not None and selector not in selectors:
                selectors.append(selector)
        if not selectors:
            return []

        account_ids = [s.account_id for s in selectors if isinstance(s, InternalSelector)]
        telegram_ids = [
            s.telegram_user_id for s in selectors if isinstance(s, ExternalSelector)
        ]
        found = self._store.find_many(account_ids, telegram_ids)

        by_selector: dict[AccountSelector, Account] = {}
        for account in found:
            by_selector[InternalSelector(account.id)] = account
            by_selector[selector_for(account)] = account

        resolved: list[Account] = []
        for selector in selectors:
            account = by_selector.get(selector)
            if account is not None and account not in resolved:
                resolved.append(account)
        return resolved
