import time

from authlib.common.security import generate_token
from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.taskflow.core.errors import NotConfiguredError
from src.taskflow.runtime.context import get_config


class SessionIssuer:
    """Mints session credentials for authenticated accounts."""

    def issue(
        self,
        account_id: str,
        telegram_user_id: str | None = None,
        *,
        expires_in_seconds: int | None = None,
        secret: str | None = None,
    ) -> str:
        """Sign a session JWT for an account.

        Args:
            account_id: Internal account id (``sub`` claim)
            telegram_user_id: Telegram identity (``tg`` claim), omitted when None
            expires_in_seconds: Lifetime override (default: session.ttl_seconds, 30 days)
            secret: Signing key override (default: session.jwt_secret)

        Returns:
            Signed JWT string

        Raises:
            NotConfiguredError: No signing secret is configured
        """
        session_cfg = get_config().session
        secret = secret or session_cfg.jwt_secret
        if not secret:
            raise NotConfiguredError("session JWT secret not configured")

        now = int(time.time())
        payload = {
            "iss": session_cfg.issuer,
            "sub": account_id,
            "iat": now,
            "exp": now + (
                session_cfg.ttl_seconds if expires_in_seconds is None else expires_in_seconds
            ),
            "jti": generate_token(16),
        }
        if telegram_user_id:
            payload["tg"] = telegram_user_id

        try:
            header = {"alg": session_cfg.algorithm, "typ": "JWT"}
            token = JsonWebToken([session_cfg.algorithm]).encode(header, payload, secret)
        except JoseError:
            logger.exception("Session JWT encoding failed")
            raise

        # authlib returns bytes
        return token.decode() if isinstance(token, bytes) else token
