"""Telegram chat link entity module."""

from .entity import TelegramLink
from .repository import TelegramLinkRepository
from .table import TelegramLinkTable

__all__ = ["TelegramLink", "TelegramLinkRepository", "TelegramLinkTable"]
