"""Telegram login endpoint."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from src.taskflow.api.http.deps import get_telegram_login_service
from src.taskflow.core.models.account_view import AccountView
from src.taskflow.core.services import TelegramLoginService
from src.taskflow.runtime.context import get_config

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _cookie_settings() -> dict[str, Any]:
    """Cookie flags for the session credential."""
    return {
        "httponly": True,
        "secure": get_config().app.environment == "production",
        "samesite": "lax",
        "path": "/",
    }


@router.post("/telegram/login")
def telegram_login(
    response: Response,
    payload: Any = Body(default=None),
    login_service: TelegramLoginService = Depends(get_telegram_login_service),
) -> dict[str, Any]:
    """Exchange a Telegram Login Widget payload for a session token.

    The payload is taken verbatim: every field it carries (other than
    ``hash``) is part of the signed data.
    """
    result = login_service.login(payload)

    session_cfg = get_config().session
    response.set_cookie(
        key=session_cfg.cookie_name,
        value=result.token,
        max_age=session_cfg.ttl_seconds,
        **_cookie_settings(),
    )
    return {
        "token": result.token,
        "user": AccountView.from_account(result.account).to_response(),
    }
