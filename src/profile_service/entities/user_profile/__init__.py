"""User profile entity module.

- UserProfile: Domain entity returned to callers
- UserProfileCandidate: Caller-supplied mutable fields (create/update body)
- UserProfileTable: Database persistence model
- UserProfileRepository: Data access layer over the relational store
"""

from .entity import UserProfile, UserProfileCandidate
from .repository import UserProfileRepository
from .table import UserProfileTable

__all__ = [
    "UserProfile",
    "UserProfileCandidate",
    "UserProfileRepository",
    "UserProfileTable",
]
