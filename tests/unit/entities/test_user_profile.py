"""Tests for the user profile entity, table and repository.

Repository tests run against a real file-backed SQLite database.
"""

from datetime import datetime
from unittest.mock import patch

import pytest
from pydantic import ValidationError
from sqlalchemy import exc as sa_exc
from sqlalchemy import inspect

from src.profile_service.core.errors import (
    ProfileNotFoundError,
    StoreError,
    StoreErrorKind,
)
from src.profile_service.entities.user_profile import (
    UserProfile,
    UserProfileCandidate,
    UserProfileRepository,
)
from src.profile_service.entities.user_profile.repository import translate_store_errors


class TestUserProfileEntity:
    def test_normalized_copy_collapses_whitespace(self):
        profile = UserProfile(
            id=1, username="alice", email="alice@example.com", bio="\t hello \n\n world  "
        )

        normalized = profile.with_normalized_bio()

        assert normalized.bio == "hello world"
        assert profile.bio == "\t hello \n\n world  "

    def test_created_is_optional(self):
        profile = UserProfile(id=1, username="alice", email="alice@example.com", bio="")

        assert profile.created is None

    def test_candidate_defaults_bio_to_empty(self):
        candidate = UserProfileCandidate(username="alice", email="alice@example.com")

        assert candidate.bio == ""

    def test_candidate_ignores_unknown_fields(self):
        candidate = UserProfileCandidate.model_validate(
            {"username": "alice", "email": "a@example.com", "id": 7, "created": "x"}
        )

        assert not hasattr(candidate, "id")

    def test_candidate_rejects_wrong_types(self):
        with pytest.raises(ValidationError):
            UserProfileCandidate.model_validate({"username": 123, "email": "a@example.com"})


class TestUserProfileTable:
    def test_schema_has_unique_username_and_email(self, database_service):
        inspector = inspect(database_service.engine)
        columns = {c["name"]: c for c in inspector.get_columns("users")}
        unique_columns = {
            tuple(u["column_names"]) for u in inspector.get_unique_constraints("users")
        }
        unique_indexes = {
            tuple(i["column_names"]) for i in inspector.get_indexes("users") if i["unique"]
        }

        assert set(columns) == {"id", "username", "email", "bio", "created"}
        assert columns["bio"]["nullable"] is True
        assert ("username",) in unique_columns | unique_indexes
        assert ("email",) in unique_columns | unique_indexes


class TestUserProfileRepository:
    def test_insert_assigns_id_and_created(self, repository: UserProfileRepository, make_candidate):
        user_id, created = repository.insert(make_candidate())

        assert isinstance(user_id, int)
        assert isinstance(created, datetime)

    def test_insert_ids_are_unique(self, repository, make_candidate):
        first, _ = repository.insert(make_candidate(username="one"))
        second, _ = repository.insert(make_candidate(username="two"))

        assert first != second

    def test_fetch_by_id(self, repository, make_candidate):
        user_id, created = repository.insert(make_candidate(bio="raw  bio"))

        row = repository.fetch_by_id(user_id)

        assert row.username == "alice"
        assert row.bio == "raw  bio"
        assert row.created == created

    def test_fetch_by_id_missing(self, repository):
        with pytest.raises(ProfileNotFoundError) as exc_info:
            repository.fetch_by_id(12345)

        assert exc_info.value.user_id == 12345

    def test_duplicate_email_is_constraint_violation(self, repository, make_candidate):
        repository.insert(make_candidate(username="one", email="same@example.com"))

        with pytest.raises(StoreError) as exc_info:
            repository.insert(make_candidate(username="two", email="same@example.com"))

        assert exc_info.value.kind is StoreErrorKind.CONSTRAINT_VIOLATION

    def test_untrusted_values_are_bound_not_interpolated(self, repository, make_candidate):
        hostile = "x'); DROP TABLE users; --"
        user_id, _ = repository.insert(make_candidate(bio=hostile))

        assert repository.fetch_by_id(user_id).bio == hostile
        assert len(repository.fetch_all()) == 1

    def test_fetch_all_newest_first(self, repository, make_candidate):
        ids = [repository.insert(make_candidate(username=f"user{i}"))[0] for i in range(3)]

        rows = repository.fetch_all()

        assert [row.id for row in rows] == list(reversed(ids))

    def test_update_returns_rows_affected(self, repository, make_candidate):
        user_id, _ = repository.insert(make_candidate())

        assert repository.update(user_id, "renamed", "renamed@example.com", "new") == 1
        row = repository.fetch_by_id(user_id)
        assert (row.username, row.email, row.bio) == ("renamed", "renamed@example.com", "new")

    def test_update_missing_id_affects_nothing(self, repository):
        assert repository.update(999999, "ghost", "ghost@example.com", "") == 0

    def test_update_into_existing_username_is_constraint_violation(
        self, repository, make_candidate
    ):
        repository.insert(make_candidate(username="taken"))
        user_id, _ = repository.insert(make_candidate(username="free"))

        with pytest.raises(StoreError) as exc_info:
            repository.update(user_id, "taken", "free@example.com", "")

        assert exc_info.value.kind is StoreErrorKind.CONSTRAINT_VIOLATION

    def test_search_preserves_insertion_order(self, repository, make_candidate):
        ids = [
            repository.insert(make_candidate(username=f"match{i}", bio="Shared TERM"))[0]
            for i in range(3)
        ]
        repository.insert(make_candidate(username="other", bio="unrelated"))

        rows = repository.search("term")

        assert [row.id for row in rows] == ids

    def test_search_lowercases_term(self, repository, make_candidate):
        user_id, _ = repository.insert(make_candidate(username="MixedCase"))

        assert [row.id for row in repository.search("MIXEDcase")] == [user_id]

    @pytest.mark.parametrize("term", ["élan", "ÉLAN", "Élan"])
    def test_search_folds_non_ascii_case(self, repository, make_candidate, term):
        user_id, _ = repository.insert(make_candidate(username="vital", bio="Élan vital"))
        repository.insert(make_candidate(username="other", bio="elan without accent"))

        assert [row.id for row in repository.search(term)] == [user_id]

    def test_search_escapes_underscore(self, repository, make_candidate):
        repository.insert(make_candidate(username="abcde"))
        user_id, _ = repository.insert(make_candidate(username="ab_de"))

        assert [row.id for row in repository.search("b_d")] == [user_id]

    def test_connection_failure_is_translated(self, repository, database_service):
        error = sa_exc.OperationalError("SELECT 1", {}, Exception("server closed"))

        with patch.object(database_service, "get_session", side_effect=error):
            with pytest.raises(StoreError) as exc_info:
                repository.fetch_all()

        assert exc_info.value.kind is StoreErrorKind.CONNECTION_FAILURE


class TestTranslateStoreErrors:
    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (
                sa_exc.IntegrityError("INSERT", {}, Exception("unique")),
                StoreErrorKind.CONSTRAINT_VIOLATION,
            ),
            (
                sa_exc.OperationalError("SELECT", {}, Exception("down")),
                StoreErrorKind.CONNECTION_FAILURE,
            ),
            (sa_exc.TimeoutError("pool exhausted"), StoreErrorKind.CONNECTION_FAILURE),
            (
                sa_exc.ProgrammingError("SELECT", {}, Exception("syntax")),
                StoreErrorKind.QUERY_FAILURE,
            ),
            (sa_exc.NoResultFound("none"), StoreErrorKind.QUERY_FAILURE),
        ],
    )
    def test_kinds(self, error, kind):
        with pytest.raises(StoreError) as exc_info:
            with translate_store_errors("op"):
                raise error

        assert exc_info.value.kind is kind
        assert exc_info.value.__cause__ is error

    def test_unrelated_errors_pass_through(self):
        with pytest.raises(KeyError):
            with translate_store_errors("op"):
                raise KeyError("x")
