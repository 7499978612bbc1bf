"""Session JWT verification."""

from dataclasses import dataclass

from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.taskflow.core.errors import NotConfiguredError, UnauthorizedError
from src.taskflow.runtime.context import get_config


@dataclass(frozen=True)
class SessionClaims:
    """Validated contents of a session credential."""

    account_id: str
    telegram_user_id: str | None
    expires_at: int


class SessionVerifier:
    """Checks signature, issuer and expiry of presented session tokens."""

    def verify(self, token: str, *, secret: str | None = None) -> SessionClaims:
        """Decode and validate a session JWT.

        Raises:
            NotConfiguredError: No verification secret is configured
            UnauthorizedError: Token is malformed, forged or expired
        """
        session_cfg = get_config().session
        secret = secret or session_cfg.jwt_secret
        if not secret:
            raise NotConfiguredError("session JWT secret not configured")

        claims_options = {
            "iss": {"essential": True, "value": session_cfg.issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }
        try:
            claims = JsonWebToken([session_cfg.algorithm]).decode(
                token, secret, claims_options=claims_options
            )
            claims.validate()
        except (JoseError, ValueError, TypeError) as exc:
            logger.debug("Session token rejected: {}", type(exc).__name__)
            raise UnauthorizedError(f"invalid session token: {exc}") from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise UnauthorizedError("session token has no subject")

        tg = claims.get("tg")
        return SessionClaims(
            account_id=subject,
            telegram_user_id=str(tg) if tg else None,
            expires_at=int(claims["exp"]),
        )
