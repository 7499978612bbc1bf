"""Identifier and representation models."""

from .account_view import AccountView
from .identifiers import (
    EXTERNAL_PREFIX,
    MAX_BATCH_IDS,
    AccountSelector,
    ExternalSelector,
    InternalSelector,
    decode_public_id,
    encode_public_id,
    normalize_batch_ids,
    selector_for,
)

__all__ = [
    "AccountView",
    "AccountSelector",
    "ExternalSelector",
    "InternalSelector",
    "EXTERNAL_PREFIX",
    "MAX_BATCH_IDS",
    "decode_public_id",
    "encode_public_id",
    "normalize_batch_ids",
    "selector_for",
]
