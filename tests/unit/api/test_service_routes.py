"""API tests for notifications, the bot webhook and health probes."""

import pytest
from fastapi.testclient import TestClient

from src.taskflow.api.http.app import create_app
from src.taskflow.runtime.config.config_data import ConfigData, TelegramConfig


def _start_update(user_id: int = 42, chat_id: int = 9042) -> dict:
    return {
        "update_id": 7,
        "message": {
            "message_id": 1,
            "from": {"id": user_id},
            "chat": {"id": chat_id},
            "text": "/start",
        },
    }


class TestNotify:
    def test_not_linked(self, client: TestClient):
        response = client.post("/api/notify", json={"telegramUserId": "42", "text": "hi"})

        assert response.status_code == 200
        assert response.json() == {"telegram": {"ok": False, "error": "not_linked"}}

    def test_delivers_after_start(self, client: TestClient, bot_api):
        client.post("/api/telegram/webhook", json=_start_update())

        response = client.post("/api/notify", json={"telegramUserId": 42, "text": "New task"})

        assert response.json() == {"telegram": {"ok": True}}
        assert bot_api.sent[-1] == {"chat_id": 9042, "text": "New task"}

    def test_requires_text_and_recipient(self, client: TestClient):
        for body in ({"telegramUserId": "42"}, {"text": "hi"}, {"telegramUserId": "42", "text": "  "}):
            response = client.post("/api/notify", json=body)
            assert response.status_code == 400
            assert response.json() == {"error": "bad_payload"}


class TestWebhook:
    def test_start_links_chat(self, client: TestClient, bot_service, bot_api):
        response = client.post("/api/telegram/webhook", json=_start_update())

        assert response.status_code == 200
        assert response.json() == {"ok": True, "handled": "start"}
        assert bot_service.linked_chat("42") == 9042
        assert len(bot_api.requests) == 1

    def test_non_command_is_acknowledged(self, client: TestClient):
        response = client.post("/api/telegram/webhook", json={"update_id": 1})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "handled": None}

    @pytest.mark.parametrize(
        "message",
        [
            {"text": "/start", "chat": 5, "from": {"id": 42}},
            {"text": "/start", "chat": {"id": 9042}, "from": [42]},
            {"text": "/start", "chat": {"id": "abc"}, "from": {"id": 42}},
            {"text": "/unlink", "chat": {"id": {}}, "from": {"id": 42}},
        ],
    )
    def test_malformed_sender_or_chat_is_acknowledged(
        self, client: TestClient, bot_service, bot_api, message
    ):
        response = client.post(
            "/api/telegram/webhook", json={"update_id": 3, "message": message}
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "handled": None}
        assert bot_service.linked_chat("42") is None
        assert bot_api.requests == []

    def test_secret_token_enforced(self, test_config: ConfigData, app_dependencies):
        config = test_config.model_copy(
            update={
                "telegram": test_config.telegram.model_copy(update={"webhook_secret": "s3cret"})
            }
        )
        with TestClient(create_app(config, app_dependencies)) as client:
            rejected = client.post("/api/telegram/webhook", json=_start_update())
            accepted = client.post(
                "/api/telegram/webhook",
                json=_start_update(),
                headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
            )

        assert rejected.status_code == 401
        assert accepted.status_code == 200


class TestHealth:
    def test_liveness(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["configuration"]["missing"] == []

    def test_security_headers_and_request_id(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Request-ID"] == "req-123"


class TestMissingSecrets:
    def test_requests_fail_with_server_not_configured(
        self, test_config: ConfigData, app_dependencies, login_payload
    ):
        config = test_config.model_copy(
            update={"telegram": TelegramConfig(bot_token=None)}
        )
        with TestClient(create_app(config, app_dependencies)) as client:
            response = client.post("/api/auth/telegram/login", json=login_payload())

        assert response.status_code == 500
        assert response.json() == {"error": "server_not_configured"}

    def test_production_refuses_to_start(self, test_config: ConfigData, app_dependencies):
        config = test_config.model_copy(
            update={
                "app": test_config.app.model_copy(update={"environment": "production"}),
                "session": test_config.session.model_copy(update={"jwt_secret": None}),
            }
        )
        app = create_app(config, app_dependencies)

        with pytest.raises(RuntimeError, match="session.jwt_secret"):
            with TestClient(app):
                pass
