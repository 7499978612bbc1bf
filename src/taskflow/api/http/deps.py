"""FastAPI dependency implementations."""

from __future__ import annotations

import re

from fastapi import Depends, Request
from loguru import logger

from src.taskflow.api.http.app_data import ApplicationDependencies
from src.taskflow.core.errors import NotConfiguredError, UnauthorizedError
from src.taskflow.core.models.identifiers import decode_public_id
from src.taskflow.core.services import (
    AccountResolver,
    DbSessionService,
    IdentityStore,
    RoleAssignmentService,
    SessionIssuer,
    SessionVerifier,
    TelegramBotService,
    TelegramLoginService,
)
from src.taskflow.entities.core.account import Account
from src.taskflow.runtime.context import get_config

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return get_app_dependencies(request).database_service


def get_identity_store(request: Request) -> IdentityStore:
    """Get the identity store instance."""
    return get_app_dependencies(request).identity_store


def get_account_resolver(request: Request) -> AccountResolver:
    """Get the account resolver instance."""
    return get_app_dependencies(request).account_resolver


def get_role_assignment_service(request: Request) -> RoleAssignmentService:
    """Get the role assignment service instance."""
    return get_app_dependencies(request).role_assignment_service


def get_session_issuer(request: Request) -> SessionIssuer:
    """Get the session issuer instance."""
    return get_app_dependencies(request).session_issuer


def get_session_verifier(request: Request) -> SessionVerifier:
    """Get the session verifier instance."""
    return get_app_dependencies(request).session_verifier


def get_telegram_login_service(request: Request) -> TelegramLoginService:
    """Get the Telegram login service instance."""
    return get_app_dependencies(request).telegram_login_service


def get_telegram_bot_service(request: Request) -> TelegramBotService:
    """Get the Telegram bot service instance."""
    return get_app_dependencies(request).telegram_bot_service


def _presented_token(request: Request) -> str:
    header = request.headers.get("Authorization")
    if header:
        match = _BEARER_RE.match(header.strip())
        if match:
            return match.group(1).strip()
    return request.cookies.get(get_config().session.cookie_name, "").strip()


def _account_from_token(
    token: str, verifier: SessionVerifier, store: IdentityStore
) -> Account | None:
    """Account named by a valid session token. None when the token is unusable."""
    try:
        claims = verifier.verify(token)
    except (UnauthorizedError, NotConfiguredError) as e:
        logger.debug("Ignoring session token: {}", e.code)
        return None

    account = store.find_by_id(claims.account_id)
    if account is None:
        logger.info("Session token names unknown account {}", claims.account_id)
        raise UnauthorizedError("account behind session token no longer exists")
    return account


def get_current_account(
    request: Request,
    store: IdentityStore = Depends(get_identity_store),
    resolver: AccountResolver = Depends(get_account_resolver),
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> Account:
    """Resolve the calling account.

    Authentication priority:
    1. ``Authorization: Bearer <jwt>``
    2. Session cookie (``session.cookie_name``)
    3. ``X-User-Id: <public id>`` when ``auth.allow_user_id_header`` is on

    A token that fails verification falls through to the header.
    """
    token = _presented_token(request)
    if token:
        account = _account_from_token(token, verifier, store)
        if account is not None:
            request.state.auth_method = "token"
            return account

    raw_user_id = request.headers.get("X-User-Id", "").strip()
    if raw_user_id and get_config().auth.allow_user_id_header:
        selector = decode_public_id(raw_user_id)
        if selector is None:
            raise UnauthorizedError("unrecognised X-User-Id")
        account = resolver.resolve_selector(selector)
        if account is None:
            raise UnauthorizedError("X-User-Id names no account")
        request.state.auth_method = "user_id_header"
        return account

    raise UnauthorizedError("no usable credentials")
