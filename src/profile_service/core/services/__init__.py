"""Core services exports."""

from .database.db_manage import DbManageService
from .database.db_session import DbSessionService
from .profile.profile_service import ProfileService

__all__ = [
    "DbManageService",
    "DbSessionService",
    "ProfileService",
]
