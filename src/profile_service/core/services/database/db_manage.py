"""Schema management for the profile store."""

from loguru import logger
from sqlmodel import SQLModel

from src.profile_service.core.services.database.db_session import DbSessionService


class DbManageService:
    def __init__(self, database: DbSessionService):
        self._engine = database.engine

    def create_all(self) -> None:
        """Create all database tables."""
        from src.profile_service.entities.user_profile import UserProfileTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
