"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, create_engine

from src.taskflow.runtime.config.config_data import ConfigData
from src.taskflow.runtime.context import get_config


def build_engine(config: ConfigData) -> Engine:
    """Create the SQLAlchemy engine described by ``config.database``."""
    db_config = config.database
    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": False,
        "connect_args": _get_connect_args(config),
    }
    # SQLite picks its own pool class; pool sizing only applies to servers
    if not db_config.is_sqlite:
        engine_kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
            }
        )

    logger.info("Initializing database engine for environment: {}", config.app.environment)
    return create_engine(db_config.connection_string, **engine_kwargs)


def _get_connect_args(config: ConfigData) -> dict:
    """Get database-specific connection arguments."""
    connect_args = {}

    if "postgresql" in config.database.url:
        connect_args.update(
            {
                "application_name": f"{config.app.environment}_taskflow",
                "connect_timeout": 30,
            }
        )

    elif config.database.is_sqlite:
        connect_args.update(
            {
                "check_same_thread": False,
                "timeout": 20,  # lock wait, seconds
            }
        )

        if config.app.environment == "production":
            logger.warning(
                "SQLite in production: concurrent account writes will serialize on the file lock"
            )

    return connect_args


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Wrap an existing engine, or build one from the current configuration."""
        self._engine = engine if engine is not None else build_engine(get_config())

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """One transaction: commit on success, roll back on any error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except IntegrityError:
            # constraint races are resolved by the caller
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.bind(error_type=type(e).__name__).error("Transaction rolled back: {}", e)
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """True when the database answers a trivial query."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.bind(error_type=type(e).__name__).error("Database unreachable: {}", e)
            return False
