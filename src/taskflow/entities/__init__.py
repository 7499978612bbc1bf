"""Entities grouped by business concept.

Each entity package holds its domain model (entity.py), persistence model
(table.py) and data access layer (repository.py).
"""

from .core.account import Account, AccountRepository, AccountTable, ProfileFields, Role
from .core.telegram_link import TelegramLink, TelegramLinkRepository, TelegramLinkTable

__all__ = [
    "Account",
    "AccountRepository",
    "AccountTable",
    "ProfileFields",
    "Role",
    "TelegramLink",
    "TelegramLinkRepository",
    "TelegramLinkTable",
]
