"""Core services exports."""

# Database Service
from .database.db_session import DbSessionService

# Identity Services
from .account_resolver import AccountResolver
from .identity_store import IdentityStore, RoleUpdateOutcome
from .role_assignment import RoleAssignmentService

# Session Services
from .jwt import SessionClaims, SessionIssuer, SessionVerifier

# Telegram Services
from .telegram_bot import NotificationResult, TelegramBotService
from .telegram_login import LoginResult, TelegramLoginService

__all__ = [
    # Database Service
    "DbSessionService",
    # Identity Services
    "AccountResolver",
    "IdentityStore",
    "RoleUpdateOutcome",
    "RoleAssignmentService",
    # Session Services
    "SessionClaims",
    "SessionIssuer",
    "SessionVerifier",
    # Telegram Services
    "LoginResult",
    "NotificationResult",
    "TelegramBotService",
    "TelegramLoginService",
]
