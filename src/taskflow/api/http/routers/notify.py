"""Outbound notifications."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from src.taskflow.api.http.deps import get_telegram_bot_service
from src.taskflow.core.errors import InvalidPayloadError
from src.taskflow.core.services import TelegramBotService

router = APIRouter(prefix="/api", tags=["notify"])


class NotifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    telegram_user_id: str | None = Field(default=None, alias="telegramUserId")
    text: str | None = None


@router.post("/notify")
async def notify(
    body: NotifyRequest,
    bot: TelegramBotService = Depends(get_telegram_bot_service),
) -> dict[str, Any]:
    """Send ``text`` to the user's linked Telegram chat.

    Delivery is best effort; the outcome is reported under ``telegram``.
    """
    text = (body.text or "").strip()
    telegram_user_id = (body.telegram_user_id or "").strip()
    if not text or not telegram_user_id:
        raise InvalidPayloadError("notify needs telegramUserId and text")

    result = await bot.send_notification(telegram_user_id, text)
    return {"telegram": result.model_dump(exclude_none=True)}
