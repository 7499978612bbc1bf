"""Best-effort Telegram bot: chat linking and outbound notifications.

Nothing here raises into callers. Delivery problems are reported through
``NotificationResult.error`` and never affect identity or role outcomes.
"""

import re
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from src.taskflow.core.services.database.db_session import DbSessionService
from src.taskflow.entities.core.telegram_link import TelegramLinkRepository
from src.taskflow.runtime.context import get_config

_COMMAND_RE = re.compile(r"^/(start|link|unlink)(?:@[\w_]+)?(?:\s|$)")

LINKED_TEXT = (
    "Done! TaskFlow notifications will be delivered to this chat.\n\n"
    "If you have not signed in yet, go back to the app and log in with Telegram."
)
LINK_FAILED_TEXT = "Could not link this chat. Please try again a bit later."
UNLINKED_TEXT = "Unlinked. Notifications will no longer be sent here."
NOTHING_TO_UNLINK_TEXT = "Nothing to unlink."
UNLINK_FAILED_TEXT = "Could not unlink this chat. Please try again a bit later."


class NotificationResult(BaseModel):
    """Outcome of a notification attempt."""

    ok: bool
    error: str | None = None  # bot_disabled | not_linked | send_failed


def _object_id(obj: Any) -> int | None:
    """Numeric ``id`` of a Bot API chat or user object, or None when malformed."""
    if not isinstance(obj, dict):
        return None
    value = obj.get("id")
    if isinstance(value, bool):
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    return value or None


class TelegramBotService:
    def __init__(
        self,
        database_service: DbSessionService,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._db = database_service
        # injectable for tests (httpx.MockTransport)
        self._transport = transport

    def _api_url(self, token: str, method: str) -> str:
        base = get_config().telegram.api_base_url.rstrip("/")
        return f"{base}/bot{token}/{method}"

    async def _send_message(self, token: str, chat_id: int, text: str) -> bool:
        timeout = get_config().telegram.request_timeout_seconds
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.post(
                    self._api_url(token, "sendMessage"),
                    json={"chat_id": chat_id, "text": text},
                )
        except httpx.HTTPError as e:
            logger.warning("Telegram sendMessage failed: {}", type(e).__name__)
            return False

        if 200 <= resp.status_code < 300:
            return True
        # response body may echo the request; keep it out of logs
        logger.warning("Telegram sendMessage returned HTTP {}", resp.status_code)
        return False

    def linked_chat(self, telegram_user_id: str) -> int | None:
        with self._db.session_scope() as session:
            link = TelegramLinkRepository(session).get(str(telegram_user_id))
            return link.chat_id if link else None

    def link_chat(self, telegram_user_id: str, chat_id: int) -> None:
        with self._db.session_scope() as session:
            TelegramLinkRepository(session).upsert(str(telegram_user_id), chat_id)
        logger.info("Linked chat for telegram user {}", telegram_user_id)

    def unlink_chat(self, telegram_user_id: str) -> bool:
        with self._db.session_scope() as session:
            existed = TelegramLinkRepository(session).remove(str(telegram_user_id))
        if existed:
            logger.info("Unlinked chat for telegram user {}", telegram_user_id)
        return existed

    async def send_notification(self, telegram_user_id: str, text: str) -> NotificationResult:
        """Deliver ``text`` to the chat linked to ``telegram_user_id``."""
        token = get_config().telegram.bot_token
        if not token:
            return NotificationResult(ok=False, error="bot_disabled")

        try:
            chat_id = self.linked_chat(telegram_user_id)
        except SQLAlchemyError as e:
            logger.warning("Chat link lookup failed: {}", type(e).__name__)
            return NotificationResult(ok=False, error="send_failed")
        if chat_id is None:
            return NotificationResult(ok=False, error="not_linked")

        if not await self._send_message(token, chat_id, text):
            return NotificationResult(ok=False, error="send_failed")
        return NotificationResult(ok=True)

    async def handle_update(self, update: dict[str, Any]) -> str | None:
        """Process one Bot API update.

        Returns the handled command name, or None when the update was ignored.
        """
        token = get_config().telegram.bot_token
        if not token:
            return None

        message = update.get("message") if isinstance(update, dict) else None
        if not isinstance(message, dict):
            return None
        text = message.get("text")
        match = _COMMAND_RE.match(text) if isinstance(text, str) else None
        if match is None:
            return None

        chat_id = _object_id(message.get("chat"))
        telegram_user_id = _object_id(message.get("from"))
        if chat_id is None or telegram_user_id is None:
            return None

        command = match.group(1)
        if command == "unlink":
            try:
                existed = self.unlink_chat(str(telegram_user_id))
                reply = UNLINKED_TEXT if existed else NOTHING_TO_UNLINK_TEXT
            except SQLAlchemyError as e:
                logger.warning("Unlink failed: {}", type(e).__name__)
                reply = UNLINK_FAILED_TEXT
        else:
            try:
                self.link_chat(str(telegram_user_id), chat_id)
                reply = LINKED_TEXT
            except SQLAlchemyError as e:
                logger.warning("Link failed: {}", type(e).__name__)
                reply = LINK_FAILED_TEXT

        await self._send_message(token, chat_id, reply)
        return command
