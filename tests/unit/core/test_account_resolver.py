"""Unit tests for AccountResolver."""

import threading
import uuid
from unittest.mock import Mock

import pytest

from src.taskflow.core.errors import AccountNotFoundError, InvalidIdentifierError
from src.taskflow.core.services import AccountResolver, DbSessionService, IdentityStore
from src.taskflow.entities.core.account import Account, ProfileFields


class TestResolveOrCreate:
    def test_creates_on_first_sight(self, resolver: AccountResolver, store: IdentityStore):
        account = resolver.resolve_or_create("6001", ProfileFields(username="new"))

        assert account.telegram_user_id == "6001"
        assert store.find_by_telegram_id("6001").id == account.id

    def test_same_identity_resolves_to_same_account(self, resolver: AccountResolver):
        first = resolver.resolve_or_create("6002", ProfileFields())
        second = resolver.resolve_or_create("6002", ProfileFields())
        assert first.id == second.id

    def test_refreshes_profile_non_destructively(self, resolver: AccountResolver):
        resolver.resolve_or_create(
            "6003", ProfileFields(full_name="Grace Hopper", username="grace")
        )

        refreshed = resolver.resolve_or_create(
            "6003", ProfileFields(full_name=None, username="amazing_grace", photo_url="")
        )

        assert refreshed.full_name == "Grace Hopper"
        assert refreshed.username == "amazing_grace"
        assert refreshed.photo_url is None

    def test_creates_when_account_vanishes_between_read_and_update(self):
        existing = Account(telegram_user_id="6004")
        created = Account(telegram_user_id="6004")
        store = Mock(spec=IdentityStore)
        store.find_by_telegram_id.return_value = existing
        store.update_profile.return_value = None
        store.create_from_telegram.return_value = created

        result = AccountResolver(store).resolve_or_create("6004", ProfileFields())

        assert result is created
        store.create_from_telegram.assert_called_once()

    def test_concurrent_first_logins_share_one_account(self, file_engine):
        resolver = AccountResolver(IdentityStore(DbSessionService(file_engine)))
        barrier = threading.Barrier(2)
        results: list[Account] = []

        def login() -> None:
            barrier.wait()
            results.append(resolver.resolve_or_create("6005", ProfileFields()))

        threads = [threading.Thread(target=login) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 2
        assert results[0].id == results[1].id


class TestResolveByPublicId:
    def test_external_identifier(self, resolver: AccountResolver):
        account = resolver.resolve_or_create("7001", ProfileFields())
        assert resolver.resolve_by_public_id("tg_7001").id == account.id

    def test_internal_identifier(self, resolver: AccountResolver, store: IdentityStore):
        account = store.create_account(ProfileFields())
        assert resolver.resolve_by_public_id(account.id).id == account.id

    def test_internal_identifier_of_telegram_account(self, resolver: AccountResolver):
        account = resolver.resolve_or_create("7002", ProfileFields())
        assert resolver.resolve_by_public_id(account.id).id == account.id

    def test_invalid_identifier(self, resolver: AccountResolver):
        with pytest.raises(InvalidIdentifierError):
            resolver.resolve_by_public_id("not_a_real_id")

    def test_unknown_identifier(self, resolver: AccountResolver):
        with pytest.raises(AccountNotFoundError):
            resolver.resolve_by_public_id("tg_999999")
        with pytest.raises(AccountNotFoundError):
            resolver.resolve_by_public_id(str(uuid.uuid4()))


class TestResolveMany:
    def test_duplicates_and_invalid_entries(self, resolver: AccountResolver, store: IdentityStore):
        tg_account = resolver.resolve_or_create("1", ProfileFields())
        internal = store.create_account(ProfileFields())

        result = resolver.resolve_many(["tg_1", "tg_1", internal.id, "not_a_real_id"])

        assert [a.id for a in result] == [tg_account.id, internal.id]

    def test_preserves_caller_order(self, resolver: AccountResolver):
        a = resolver.resolve_or_create("8001", ProfileFields())
        b = resolver.resolve_or_create("8002", ProfileFields())
        c = resolver.resolve_or_create("8003", ProfileFields())

        result = resolver.resolve_many("tg_8003,tg_8001,tg_8002")

        assert [x.id for x in result] == [c.id, a.id, b.id]

    def test_unresolved_entries_are_dropped(self, resolver: AccountResolver):
        a = resolver.resolve_or_create("8101", ProfileFields())
        result = resolver.resolve_many(f"tg_404,tg_8101,{uuid.uuid4()}")
        assert [x.id for x in result] == [a.id]

    def test_same_account_by_both_identifiers_listed_once(self, resolver: AccountResolver):
        a = resolver.resolve_or_create("8201", ProfileFields())
        result = resolver.resolve_many([a.id, "tg_8201"])
        assert [x.id for x in result] == [a.id]

    def test_empty_input(self, resolver: AccountResolver):
        assert resolver.resolve_many("") == []
        assert resolver.resolve_many(None) == []

    def test_single_query_per_partition(self):
        store = Mock(spec=IdentityStore)
        store.find_many.return_value = []
        internal_ids = [str(uuid.uuid4()) for _ in range(3)]

        AccountResolver(store).resolve_many(["tg_1", "tg_2", *internal_ids])

        store.find_many.assert_called_once_with(internal_ids, ["1", "2"])
