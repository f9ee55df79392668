"""Process-local cache of user profiles keyed by id.

Entries are non-authoritative copies of store rows. There is no eviction and
no TTL: an entry lives until it is invalidated or the process exits, so the
cache grows with the number of distinct profiles read or written.
"""

from __future__ import annotations

from src.profile_service.core.storage.rwlock import ReadWriteLock
from src.profile_service.entities.user_profile.entity import UserProfile


class ProfileCache:
    """Thread-safe id -> ``UserProfile`` mapping.

    Reads share the lock, writes take it exclusively. Profiles are copied on
    the way in and on the way out, so no caller holds a reference into the
    cache.
    """

    def __init__(self) -> None:
        self._entries: dict[int, UserProfile] = {}
        self._lock = ReadWriteLock()

    def get(self, user_id: int) -> UserProfile | None:
        with self._lock.read_locked():
            profile = self._entries.get(user_id)
        return profile.model_copy() if profile is not None else None

    def put(self, profile: UserProfile) -> None:
        stored = profile.model_copy()
        with self._lock.write_locked():
            self._entries[profile.id] = stored

    def invalidate(self, user_id: int) -> bool:
        """Drop ``user_id``; returns whether an entry was present."""
        with self._lock.write_locked():
            return self._entries.pop(user_id, None) is not None

    def clear(self) -> None:
        with self._lock.write_locked():
            self._entries.clear()

    def __contains__(self, user_id: object) -> bool:
        with self._lock.read_locked():
            return user_id in self._entries

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
