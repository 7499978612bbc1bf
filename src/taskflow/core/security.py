"""Telegram login widget assertion checks.

See https://core.telegram.org/widgets/login#checking-authorization
"""

import hashlib
import hmac
import time
from collections.abc import Mapping
from typing import Any

SIGNATURE_FIELD = "hash"
ISSUED_AT_FIELD = "auth_date"
DEFAULT_MAX_AGE_SECONDS = 86400


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_data_check_string(assertion: Mapping[str, Any]) -> str:
    """Canonical ``key=value`` lines of every field except the signature.

    Fields whose value is None are dropped; keys are sorted lexicographically.
    """
    return "\n".join(
        f"{key}={_render_value(assertion[key])}"
        for key in sorted(assertion)
        if key != SIGNATURE_FIELD and assertion[key] is not None
    )


def compute_login_signature(assertion: Mapping[str, Any], shared_secret: str) -> str:
    """Hex HMAC-SHA256 of the data check string, keyed by SHA256(shared_secret)."""
    secret_key = hashlib.sha256(shared_secret.encode("utf-8")).digest()
    data_check_string = build_data_check_string(assertion)
    return hmac.new(
        secret_key, data_check_string.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def verify_login_signature(assertion: Mapping[str, Any], shared_secret: str) -> bool:
    """Check the assertion's ``hash`` against the shared secret.

    Never raises: anything malformed is simply not valid.

    Args:
        assertion: Flat mapping of widget fields including ``hash``
        shared_secret: The bot token

    Returns:
        True if the signature matches
    """
    try:
        signature = assertion.get(SIGNATURE_FIELD)
        if not isinstance(signature, str) or not signature:
            return False

        expected = bytes.fromhex(compute_login_signature(assertion, shared_secret))
        provided = bytes.fromhex(signature)
        if len(expected) != len(provided):
            return False

        # Constant-time comparison
        return hmac.compare_digest(expected, provided)

    except (ValueError, TypeError, AttributeError):
        return False


def is_assertion_fresh(
    issued_at_seconds: int,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    now: float | None = None,
) -> bool:
    """True unless the assertion was issued more than ``max_age_seconds`` ago."""
    current = int(now if now is not None else time.time())
    return current - issued_at_seconds <= max_age_seconds
