"""Data access for user profiles.

Every statement is built with SQLAlchemy expressions so caller-supplied
values only ever travel as bound parameters.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import exc as sa_exc
from sqlalchemy import func, insert, or_, update
from sqlmodel import Session, col, select

from src.profile_service.core.errors import (
    ProfileNotFoundError,
    StoreError,
    StoreErrorKind,
)
from src.profile_service.entities.user_profile.entity import UserProfileCandidate
from src.profile_service.entities.user_profile.table import UserProfileTable

if TYPE_CHECKING:
    from src.profile_service.core.services.database.db_session import DbSessionService


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as ``StoreError`` with a kind."""
    try:
        yield
    except sa_exc.IntegrityError as e:
        raise StoreError(
            StoreErrorKind.CONSTRAINT_VIOLATION, f"{operation}: constraint violated"
        ) from e
    except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError) as e:
        raise StoreError(
            StoreErrorKind.CONNECTION_FAILURE, f"{operation}: store unavailable"
        ) from e
    except sa_exc.DBAPIError as e:
        if e.connection_invalidated:
            raise StoreError(
                StoreErrorKind.CONNECTION_FAILURE, f"{operation}: connection lost"
            ) from e
        raise StoreError(StoreErrorKind.QUERY_FAILURE, f"{operation}: query failed") from e
    except sa_exc.SQLAlchemyError as e:
        raise StoreError(StoreErrorKind.QUERY_FAILURE, f"{operation}: query failed") from e


class UserProfileRepository:
    """Data-access layer for user profiles; the authoritative source of truth."""

    def __init__(self, database: "DbSessionService") -> None:
        self._database = database

    @contextmanager
    def _scope(self, operation: str) -> Iterator[Session]:
        with translate_store_errors(operation), self._database.session_scope() as session:
            yield session

    def insert(self, candidate: UserProfileCandidate) -> tuple[int, datetime]:
        """Insert a new row and return the store-assigned ``(id, created)``."""
        statement = (
            insert(UserProfileTable)
            .values(
                username=candidate.username,
                email=candidate.email,
                bio=candidate.bio,
            )
            .returning(UserProfileTable.id, UserProfileTable.created)
        )
        with self._scope("insert") as session:
            row = session.connection().execute(statement).one()
            return row.id, row.created

    def fetch_by_id(self, user_id: int) -> UserProfileTable:
        with self._scope("fetch_by_id") as session:
            row = session.get(UserProfileTable, user_id)
        if row is None:
            raise ProfileNotFoundError(user_id)
        return row

    def fetch_all(self) -> list[UserProfileTable]:
        """All rows, newest first."""
        statement = select(UserProfileTable).order_by(
            col(UserProfileTable.created).desc(), col(UserProfileTable.id).desc()
        )
        with self._scope("fetch_all") as session:
            return list(session.exec(statement).all())

    def update(self, user_id: int, username: str, email: str, bio: str) -> int:
        """Replace the mutable fields of ``user_id``; returns the affected row count."""
        statement = (
            update(UserProfileTable)
            .where(col(UserProfileTable.id) == user_id)
            .values(username=username, email=email, bio=bio)
        )
        with self._scope("update") as session:
            result = session.connection().execute(statement)
            return result.rowcount

    def search(self, term: str) -> list[UserProfileTable]:
        """Rows whose username, email or bio contains ``term``, ignoring case."""
        term = term.lower()
        statement = (
            select(UserProfileTable)
            .where(
                or_(
                    func.lower(UserProfileTable.username).contains(term, autoescape=True),
                    func.lower(UserProfileTable.email).contains(term, autoescape=True),
                    func.lower(UserProfileTable.bio).contains(term, autoescape=True),
                )
            )
            .order_by(col(UserProfileTable.id))
        )
        with self._scope("search") as session:
            return list(session.exec(statement).all())
