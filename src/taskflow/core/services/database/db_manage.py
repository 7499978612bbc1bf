"""Schema management."""

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import SQLModel

from src.taskflow.core.services.database.db_session import build_engine
from src.taskflow.runtime.context import get_config


class DbManageService:
    def __init__(self, engine: Engine | None = None):
        self._engine = engine if engine is not None else build_engine(get_config())

    def create_all(self) -> None:
        """Create all database tables."""
        from src.taskflow.entities.core.account import AccountTable  # noqa: F401
        from src.taskflow.entities.core.telegram_link import TelegramLinkTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
