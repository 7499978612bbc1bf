"""Telegram login: verify the widget assertion, provision the account, mint a session."""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.taskflow.core.errors import (
    AssertionExpiredError,
    InvalidPayloadError,
    InvalidSignatureError,
    NotConfiguredError,
)
from src.taskflow.core.security import (
    ISSUED_AT_FIELD,
    SIGNATURE_FIELD,
    is_assertion_fresh,
    verify_login_signature,
)
from src.taskflow.core.services.account_resolver import AccountResolver
from src.taskflow.core.services.jwt.jwt_gen import SessionIssuer
from src.taskflow.entities.core.account import Account, ProfileFields
from src.taskflow.runtime.context import get_config

REQUIRED_FIELDS = ("id", SIGNATURE_FIELD, ISSUED_AT_FIELD)
_TELEGRAM_ID_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class LoginResult:
    token: str
    account: Account


def _optional_str(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


class TelegramLoginService:
    def __init__(self, resolver: AccountResolver, issuer: SessionIssuer):
        self._resolver = resolver
        self._issuer = issuer

    def login(self, payload: Mapping[str, Any], *, now: float | None = None) -> LoginResult:
        """Exchange a login widget payload for a session credential.

        Raises:
            NotConfiguredError: bot token or session secret missing
            InvalidPayloadError: required fields missing, id not numeric or auth_date not an integer
            InvalidSignatureError: hash does not match
            AssertionExpiredError: auth_date older than the freshness window
        """
        config = get_config()
        bot_token = config.telegram.bot_token
        if not bot_token or not config.session.jwt_secret:
            raise NotConfiguredError("telegram bot token or session secret missing")

        if not isinstance(payload, Mapping) or any(not payload.get(f) for f in REQUIRED_FIELDS):
            raise InvalidPayloadError("login payload lacks id, hash or auth_date")

        telegram_user_id = str(payload["id"])
        if isinstance(payload["id"], bool) or not _TELEGRAM_ID_RE.fullmatch(telegram_user_id):
            raise InvalidPayloadError("login id is not a numeric Telegram user id")

        if not verify_login_signature(payload, bot_token):
            logger.warning("Rejected Telegram login with invalid signature")
            raise InvalidSignatureError()

        try:
            issued_at = int(payload[ISSUED_AT_FIELD])
        except (TypeError, ValueError) as exc:
            raise InvalidPayloadError("auth_date is not an integer") from exc

        if not is_assertion_fresh(issued_at, config.telegram.auth_max_age_seconds, now=now):
            logger.info("Rejected stale Telegram login (auth_date={})", issued_at)
            raise AssertionExpiredError()

        profile = ProfileFields.from_login(
            first_name=_optional_str(payload, "first_name"),
            last_name=_optional_str(payload, "last_name"),
            username=_optional_str(payload, "username"),
            photo_url=_optional_str(payload, "photo_url"),
        )
        account = self._resolver.resolve_or_create(telegram_user_id, profile)
        token = self._issuer.issue(account.id, account.telegram_user_id)

        logger.info("Telegram login for account {}", account.id)
        return LoginResult(token=token, account=account)
