"""Telegram Bot API webhook."""

import hmac
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from src.taskflow.api.http.deps import get_telegram_bot_service
from src.taskflow.core.errors import UnauthorizedError
from src.taskflow.core.services import TelegramBotService
from src.taskflow.runtime.context import get_config

router = APIRouter(prefix="/api/telegram", tags=["telegram"])

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def require_webhook_secret(request: Request) -> None:
    """Check Telegram's secret token header when a webhook secret is configured."""
    expected = get_config().telegram.webhook_secret
    if not expected:
        return
    presented = request.headers.get(SECRET_HEADER, "")
    if not hmac.compare_digest(presented.encode(), expected.encode()):
        raise UnauthorizedError("webhook secret mismatch")


@router.post("/webhook", dependencies=[Depends(require_webhook_secret)])
async def telegram_webhook(
    update: Any = Body(default=None),
    bot: TelegramBotService = Depends(get_telegram_bot_service),
) -> dict[str, Any]:
    # Always acknowledge so Telegram does not redeliver
    handled = await bot.handle_update(update) if isinstance(update, dict) else None
    return {"ok": True, "handled": handled}
