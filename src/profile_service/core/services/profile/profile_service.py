from __future__ import annotations

import threading

from loguru import logger
from pydantic import ValidationError

from src.profile_service.core.errors import (
    ProfileNotFoundError,
    ProfileValidationError,
    StoreError,
    StoreErrorKind,
    ValidationErrorKind,
)
from src.profile_service.core.storage.profile_cache import ProfileCache
from src.profile_service.core.validation import validate_profile
from src.profile_service.entities.user_profile.entity import (
    UserProfile,
    UserProfileCandidate,
)
from src.profile_service.entities.user_profile.repository import UserProfileRepository
from src.profile_service.entities.user_profile.table import UserProfileTable


class ProfileService:
    """CRUD and search over user profiles.

    Cache policy:
    - get: read-through; a miss fetches from the store and caches the raw row.
    - create: the freshly inserted record is written straight into the cache.
    - update: the entry is invalidated, never rewritten, so the next get
      re-reads the authoritative row.
    - list: never reads the cache; backfills it after a complete fetch.
    - search: never touches the cache.

    Values returned to callers have their bio normalized; cached and stored
    values never do.
    """

    def __init__(self, repository: UserProfileRepository, cache: ProfileCache) -> None:
        self._repository = repository
        self._cache = cache
        self._request_count = 0
        self._counter_lock = threading.Lock()

    @property
    def cache(self) -> ProfileCache:
        return self._cache

    @property
    def request_count(self) -> int:
        """Operations handled by this instance. Accounting only."""
        with self._counter_lock:
            return self._request_count

    def _count_request(self) -> None:
        with self._counter_lock:
            self._request_count += 1

    @staticmethod
    def _decode(row: UserProfileTable) -> UserProfile:
        return UserProfile.model_validate(row, from_attributes=True)

    def create(self, candidate: UserProfileCandidate) -> UserProfile:
        self._count_request()
        validate_profile(candidate)

        user_id, created = self._repository.insert(candidate)
        profile = UserProfile(
            id=user_id,
            username=candidate.username,
            email=candidate.email,
            bio=candidate.bio,
            created=created,
        )
        self._cache.put(profile)
        logger.info("Created user profile {}", user_id)
        return profile

    def get(self, user_id: int) -> UserProfile:
        self._count_request()
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached.with_normalized_bio()

        row = self._repository.fetch_by_id(user_id)
        try:
            profile = self._decode(row)
        except ValidationError as e:
            raise StoreError(
                StoreErrorKind.QUERY_FAILURE, f"User {user_id} could not be decoded"
            ) from e

        self._cache.put(profile)
        return profile.with_normalized_bio()

    def list(self) -> list[UserProfile]:
        """All profiles, newest first. One undecodable row fails the whole call."""
        self._count_request()
        rows = self._repository.fetch_all()

        profiles: list[UserProfile] = []
        for row in rows:
            try:
                profiles.append(self._decode(row))
            except ValidationError as e:
                raise StoreError(
                    StoreErrorKind.QUERY_FAILURE, f"User {row.id} could not be decoded"
                ) from e

        # One exclusive lock hold per entry so readers interleave with the backfill
        for profile in profiles:
            self._cache.put(profile)

        return [profile.with_normalized_bio() for profile in profiles]

    def update(self, user_id: int, candidate: UserProfileCandidate) -> UserProfile:
        """Replace the mutable fields of ``user_id``.

        The echoed record carries the submitted fields and the id only;
        ``created`` is left unset rather than re-read from the store.
        """
        self._count_request()
        validate_profile(candidate)

        affected = self._repository.update(
            user_id, candidate.username, candidate.email, candidate.bio
        )
        if affected == 0:
            raise ProfileNotFoundError(user_id)

        self._cache.invalidate(user_id)
        logger.info("Updated user profile {}", user_id)
        return UserProfile(
            id=user_id,
            username=candidate.username,
            email=candidate.email,
            bio=candidate.bio,
        )

    def search(self, term: str | None) -> list[UserProfile]:
        """Case-insensitive substring search. Undecodable rows are skipped."""
        self._count_request()
        if not term:
            raise ProfileValidationError(ValidationErrorKind.MISSING_SEARCH_TERM)

        rows = self._repository.search(term.lower())

        profiles: list[UserProfile] = []
        for row in rows:
            try:
                profiles.append(self._decode(row).with_normalized_bio())
            except ValidationError:
                logger.warning("Skipping undecodable user profile {} in search", row.id)
        return profiles
