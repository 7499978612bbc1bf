import time
from typing import Any

from src.taskflow.core.security import compute_login_signature


def signed_login_payload(
    bot_token: str,
    telegram_user_id: int = 424242,
    auth_date: int | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """A login widget payload signed the way Telegram signs it."""
    payload: dict[str, Any] = {
        "id": telegram_user_id,
        "auth_date": auth_date if auth_date is not None else int(time.time()),
        **fields,
    }
    payload["hash"] = compute_login_signature(payload, bot_token)
    return payload


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
