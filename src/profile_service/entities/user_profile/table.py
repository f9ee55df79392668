"""User profile database table model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class UserProfileTable(SQLModel, table=True):
    """Persistence model for user profiles.

    ``id`` and ``created`` are assigned by the database. ``bio`` is nullable
    at the column level; rows holding NULL cannot be decoded into a
    ``UserProfile``.
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(
        sa_column=sa.Column(sa.String(50), unique=True, nullable=False)
    )
    email: str = Field(
        sa_column=sa.Column(sa.String(100), unique=True, nullable=False)
    )
    bio: str | None = Field(default=None, sa_column=sa.Column(sa.Text, nullable=True))
    created: datetime | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()
        ),
    )
