"""Format and content rules for profile records."""

import re

from src.profile_service.core.errors import ProfileValidationError, ValidationErrorKind

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_]{3,20}")
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

MAX_BIO_LENGTH = 1000

# Case-sensitive substrings that may not appear in a bio
BIO_DENYLIST: tuple[str, ...] = ("spam",)


def validate_profile(candidate) -> None:
    """Check ``candidate`` against the profile rules.

    ``candidate`` is anything exposing ``username``, ``email`` and ``bio``.
    The rules are checked in order and the first violation is raised as a
    ``ProfileValidationError``; returns ``None`` when the candidate is valid.
    """
    if not USERNAME_PATTERN.fullmatch(candidate.username):
        raise ProfileValidationError(ValidationErrorKind.INVALID_USERNAME)

    if not EMAIL_PATTERN.fullmatch(candidate.email):
        raise ProfileValidationError(ValidationErrorKind.INVALID_EMAIL)

    if len(candidate.bio) > MAX_BIO_LENGTH:
        raise ProfileValidationError(ValidationErrorKind.BIO_TOO_LONG)

    if any(word in candidate.bio for word in BIO_DENYLIST):
        raise ProfileValidationError(ValidationErrorKind.BIO_REJECTED)
