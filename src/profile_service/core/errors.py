"""Typed failures raised by the profile core.

Routers map these onto HTTP statuses: validation errors to 400, missing
records to 404 and store errors to 500.
"""

from enum import Enum


class ValidationErrorKind(str, Enum):
    INVALID_USERNAME = "invalid_username"
    INVALID_EMAIL = "invalid_email"
    BIO_TOO_LONG = "bio_too_long"
    BIO_REJECTED = "bio_rejected"
    MISSING_SEARCH_TERM = "missing_search_term"


class StoreErrorKind(str, Enum):
    CONNECTION_FAILURE = "connection_failure"
    CONSTRAINT_VIOLATION = "constraint_violation"
    QUERY_FAILURE = "query_failure"


_VALIDATION_MESSAGES = {
    ValidationErrorKind.INVALID_USERNAME: (
        "Username must be 3-20 characters of letters, digits or underscore"
    ),
    ValidationErrorKind.INVALID_EMAIL: "Email address is not valid",
    ValidationErrorKind.BIO_TOO_LONG: "Bio must be at most 1000 characters",
    ValidationErrorKind.BIO_REJECTED: "Bio contains disallowed content",
    ValidationErrorKind.MISSING_SEARCH_TERM: "Search query required",
}


class ProfileError(Exception):
    """Base class for all profile core failures."""


class ProfileValidationError(ProfileError):
    """Caller-supplied data broke a content or format rule. Never retried."""

    def __init__(self, kind: ValidationErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or _VALIDATION_MESSAGES[kind])


class ProfileNotFoundError(ProfileError):
    """No profile exists with the requested id."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class StoreError(ProfileError):
    """The persistent store failed or rejected the operation."""

    def __init__(self, kind: StoreErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)
