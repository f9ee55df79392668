"""User profile domain entity."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserProfileCandidate(BaseModel):
    """The mutable fields a caller submits on create and update.

    Only types are enforced here; content rules live in
    ``src.profile_service.core.validation`` so that failures carry a kind.
    """

    model_config = ConfigDict(extra="ignore", strict=True)

    username: str = Field(description="Unique handle")
    email: str = Field(description="Unique email address")
    bio: str = Field(default="", description="Free-form biography")


class UserProfile(BaseModel):
    """User profile as stored and returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Store-assigned identifier")
    username: str = Field(description="Unique handle")
    email: str = Field(description="Unique email address")
    bio: str = Field(description="Free-form biography")
    created: datetime | None = Field(
        default=None, description="Store-assigned creation timestamp"
    )

    def with_normalized_bio(self) -> "UserProfile":
        """Return a copy whose bio has whitespace runs collapsed and ends trimmed."""
        return self.model_copy(update={"bio": " ".join(self.bio.split())})
