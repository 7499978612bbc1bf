"""Unit tests for the best-effort Telegram bot service."""

import httpx
import pytest

from src.taskflow.core.services import DbSessionService, TelegramBotService
from src.taskflow.runtime.config.config_data import ConfigData, TelegramConfig
from src.taskflow.runtime.context import with_context
from tests.fixtures.api import RecordingBotApi


def _command(text: str, user_id: int = 42, chat_id: int = 9042) -> dict:
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "from": {"id": user_id, "is_bot": False, "first_name": "Ada"},
            "chat": {"id": chat_id, "type": "private"},
            "text": text,
        },
    }


class TestSendNotification:
    async def test_not_linked(self, test_config, bot_service: TelegramBotService, bot_api):
        with with_context(test_config):
            result = await bot_service.send_notification("42", "hello")

        assert result.ok is False
        assert result.error == "not_linked"
        assert bot_api.requests == []

    async def test_bot_disabled_without_token(self, test_config, bot_service, bot_api):
        with with_context(test_config):
            with with_context(ConfigData(telegram=TelegramConfig(bot_token=""))):
                result = await bot_service.send_notification("42", "hello")

        assert result.error == "bot_disabled"
        assert bot_api.requests == []

    async def test_delivers_to_linked_chat(self, test_config, bot_service, bot_api, bot_token):
        bot_service.link_chat("42", 9042)

        with with_context(test_config):
            result = await bot_service.send_notification("42", "Task accepted")

        assert result.ok is True
        assert result.error is None
        assert bot_api.sent == [{"chat_id": 9042, "text": "Task accepted"}]
        assert bot_api.requests[0].url == f"https://telegram.test/bot{bot_token}/sendMessage"

    async def test_http_error_reported_as_send_failed(self, test_config, db_service: DbSessionService):
        failing = RecordingBotApi(status_code=403)
        service = TelegramBotService(db_service, transport=failing.transport)
        service.link_chat("42", 9042)

        with with_context(test_config):
            result = await service.send_notification("42", "hello")

        assert result.ok is False
        assert result.error == "send_failed"

    async def test_transport_error_reported_as_send_failed(self, test_config, db_service):
        def explode(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        service = TelegramBotService(db_service, transport=httpx.MockTransport(explode))
        service.link_chat("42", 9042)

        with with_context(test_config):
            result = await service.send_notification("42", "hello")

        assert result.error == "send_failed"


class TestHandleUpdate:
    @pytest.mark.parametrize("text", ["/start", "/link", "/start@taskflow_bot", "/link now"])
    async def test_link_commands(self, test_config, bot_service, bot_api, text):
        with with_context(test_config):
            handled = await bot_service.handle_update(_command(text))

        assert handled in ("start", "link")
        assert bot_service.linked_chat("42") == 9042
        assert bot_api.sent[0]["chat_id"] == 9042

    async def test_relink_moves_to_new_chat(self, test_config, bot_service):
        with with_context(test_config):
            await bot_service.handle_update(_command("/start", chat_id=1))
            await bot_service.handle_update(_command("/link", chat_id=2))

        assert bot_service.linked_chat("42") == 2

    async def test_unlink(self, test_config, bot_service, bot_api):
        with with_context(test_config):
            await bot_service.handle_update(_command("/start"))
            handled = await bot_service.handle_update(_command("/unlink"))

        assert handled == "unlink"
        assert bot_service.linked_chat("42") is None
        assert "Unlinked" in bot_api.sent[-1]["text"]

    async def test_unlink_without_link(self, test_config, bot_service, bot_api):
        with with_context(test_config):
            await bot_service.handle_update(_command("/unlink"))

        assert bot_api.sent[-1]["text"] == "Nothing to unlink."

    @pytest.mark.parametrize(
        "update",
        [
            {},
            {"message": {"text": "hello", "chat": {"id": 1}, "from": {"id": 2}}},
            {"message": {"text": "/started", "chat": {"id": 1}, "from": {"id": 2}}},
            {"message": {"text": "/start", "chat": {"id": 1}}},
            {"edited_message": {"text": "/start"}},
            {"message": {"text": "/start", "chat": 5, "from": {"id": 2}}},
            {"message": {"text": "/start", "chat": {"id": 1}, "from": "ada"}},
            {"message": {"text": "/link", "chat": {"id": "abc"}, "from": {"id": 2}}},
            {"message": {"text": "/unlink", "chat": {"id": 1}, "from": {"id": None}}},
            {"message": {"text": "/start", "chat": {"id": True}, "from": {"id": 2}}},
        ],
    )
    async def test_ignored_updates(self, test_config, bot_service, bot_api, update):
        with with_context(test_config):
            assert await bot_service.handle_update(update) is None
        assert bot_api.requests == []

    async def test_send_failure_does_not_undo_link(self, test_config, db_service):
        failing = RecordingBotApi(status_code=500)
        service = TelegramBotService(db_service, transport=failing.transport)

        with with_context(test_config):
            assert await service.handle_update(_command("/start")) == "start"

        assert service.linked_chat("42") == 9042
