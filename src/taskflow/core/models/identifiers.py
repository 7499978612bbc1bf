"""Public account identifiers.

An account is addressed publicly either by its Telegram identity
(``tg_<digits>``) or, when it has none, by its internal UUID. The two
namespaces cannot collide: a UUID never starts with ``tg_``.
"""

import re
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from src.taskflow.entities.core.account import Account

EXTERNAL_PREFIX = "tg_"
MAX_BATCH_IDS = 200

_EXTERNAL_RE = re.compile(r"^tg_([0-9]+)$")


@dataclass(frozen=True)
class ExternalSelector:
    """Account addressed by Telegram user id."""

    telegram_user_id: str


@dataclass(frozen=True)
class InternalSelector:
    """Account addressed by internal id."""

    account_id: str


AccountSelector = ExternalSelector | InternalSelector


def encode_public_id(account: Account) -> str:
    if account.telegram_user_id:
        return f"{EXTERNAL_PREFIX}{account.telegram_user_id}"
    return str(account.id)


def selector_for(account: Account) -> AccountSelector:
    """The selector ``decode_public_id(encode_public_id(account))`` yields."""
    if account.telegram_user_id:
        return ExternalSelector(account.telegram_user_id)
    return InternalSelector(account.id)


def decode_public_id(public_id: str) -> AccountSelector | None:
    """Classify a public identifier. Returns None when it is neither form."""
    raw = (public_id or "").strip()
    if not raw:
        return None

    match = _EXTERNAL_RE.match(raw)
    if match:
        return ExternalSelector(match.group(1))

    try:
        return InternalSelector(str(uuid.UUID(raw)))
    except ValueError:
        return None


def normalize_batch_ids(raw: str | Iterable[str] | None) -> list[str]:
    """Split, trim and case-insensitively dedup identifiers, keeping first-seen order.

    Accepts a comma-separated string or an iterable of strings. At most
    ``MAX_BATCH_IDS`` identifiers are returned.
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)

    seen: set[str] = set()
    out: list[str] = []
    for part in parts:
        item = part.strip()
        if not item:
            continue
        key = item.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out[:MAX_BATCH_IDS]
