"""Database initialization script."""

from src.profile_service.core.services import DbManageService, DbSessionService


def init_db() -> None:
    """Create the users table if it does not exist."""
    database_service = DbSessionService()
    try:
        DbManageService(database_service).create_all()
    finally:
        database_service.dispose()


if __name__ == "__main__":
    init_db()
