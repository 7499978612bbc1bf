"""Unit tests for public identifier encoding and batch normalization."""

import uuid

import pytest

from src.taskflow.core.models.identifiers import (
    MAX_BATCH_IDS,
    ExternalSelector,
    InternalSelector,
    decode_public_id,
    encode_public_id,
    normalize_batch_ids,
    selector_for,
)
from src.taskflow.entities.core.account import Account


class TestEncodeDecode:
    def test_account_with_telegram_identity_uses_prefix(self):
        account = Account(telegram_user_id="777")
        assert encode_public_id(account) == "tg_777"

    def test_account_without_telegram_identity_uses_internal_id(self):
        account = Account()
        assert encode_public_id(account) == account.id

    @pytest.mark.parametrize("telegram_user_id", ["1", "777", None])
    def test_roundtrip_recovers_selector(self, telegram_user_id):
        account = Account(telegram_user_id=telegram_user_id)
        assert decode_public_id(encode_public_id(account)) == selector_for(account)

    def test_decode_external(self):
        assert decode_public_id("tg_123") == ExternalSelector("123")

    def test_decode_internal_is_canonicalized(self):
        raw = uuid.uuid4()
        assert decode_public_id(str(raw).upper()) == InternalSelector(str(raw))

    def test_surrounding_whitespace_ignored(self):
        assert decode_public_id("  tg_5 ") == ExternalSelector("5")

    @pytest.mark.parametrize(
        "public_id",
        [
            "",
            "   ",
            "tg_",
            "tg_abc",
            "TG_123",
            "tg_12a",
            "tg_-1",
            "tg_\u0663",
            "not_a_real_id",
            "12345",
        ],
    )
    def test_invalid_identifiers(self, public_id):
        assert decode_public_id(public_id) is None

    def test_none_is_invalid(self):
        assert decode_public_id(None) is None  # type: ignore[arg-type]


class TestNormalizeBatchIds:
    def test_comma_string_is_split_and_trimmed(self):
        assert normalize_batch_ids(" tg_1 , tg_2,,tg_3 ") == ["tg_1", "tg_2", "tg_3"]

    def test_case_insensitive_dedup_keeps_first_seen(self):
        internal = str(uuid.uuid4())
        result = normalize_batch_ids([internal, "tg_1", internal.upper(), "tg_1"])
        assert result == [internal, "tg_1"]

    def test_empty_inputs(self):
        assert normalize_batch_ids(None) == []
        assert normalize_batch_ids("") == []
        assert normalize_batch_ids([]) == []

    def test_capped_after_dedup(self):
        raw = ",".join(["tg_0"] * 50 + [f"tg_{i}" for i in range(1, 300)])
        result = normalize_batch_ids(raw)

        assert len(result) == MAX_BATCH_IDS
        assert result[0] == "tg_0"
        assert result[-1] == f"tg_{MAX_BATCH_IDS - 1}"
