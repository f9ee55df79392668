"""Entities organized by business concept.

Each entity package holds:
- entity.py: Domain model and request shapes
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .user_profile import (
    UserProfile,
    UserProfileCandidate,
    UserProfileRepository,
    UserProfileTable,
)

__all__ = [
    "UserProfile",
    "UserProfileCandidate",
    "UserProfileRepository",
    "UserProfileTable",
]
