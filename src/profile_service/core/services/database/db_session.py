"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import event, text
from sqlmodel import Session, create_engine

from src.profile_service.runtime.config.config_data import DatabaseConfig
from src.profile_service.runtime.context import get_config


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII; match Python's str.lower
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Initialize the shared database engine and its bounded connection pool."""
        main_config = get_config()
        db_config = db_config or main_config.database
        self._db_config = db_config

        logger.info(
            "Configuring database engine for environment: {}", main_config.app.environment
        )
        engine_kwargs: dict[str, Any] = {
            # Idle connections kept by the pool; the rest of max_open is overflow
            "pool_size": db_config.pool_size,
            "max_overflow": db_config.max_overflow,
            # Callers beyond max_open wait this long, then fail
            "pool_timeout": db_config.pool_timeout_seconds,
            # Maximum connection lifetime
            "pool_recycle": db_config.conn_max_lifetime_seconds,
            "pool_pre_ping": True,
            "echo": False,
            "connect_args": self._get_connect_args(db_config, main_config.app.environment),
        }

        self._engine = create_engine(db_config.connection_string, **engine_kwargs)
        if db_config.is_sqlite:
            event.listen(self._engine, "connect", _register_sqlite_functions)
        logger.info(
            "Database engine initialized",
            max_open=db_config.max_open_connections,
            max_idle=db_config.max_idle_connections,
            lifetime_s=db_config.conn_max_lifetime_seconds,
        )

    @property
    def engine(self):
        return self._engine

    def _get_connect_args(self, db_config: DatabaseConfig, environment: str) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if db_config.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,  # Sessions are used from worker threads
                    "timeout": 20,  # Lock timeout
                }
            )
            if environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )
        elif db_config.connection_string.startswith("postgresql"):
            connect_args.update(
                {
                    "application_name": "profile_service",
                    "connect_timeout": 10,
                }
            )

        return connect_args

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Rows stay readable after the scope closes
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, roll back on failure, always close."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
            "max_open": self._db_config.max_open_connections,
        }

    def active_connections(self) -> int:
        """Connections currently checked out of the pool."""
        return self.get_pool_status()["checked_out"]

    def dispose(self) -> None:
        self._engine.dispose()
