"""User profile API router.

Handlers are synchronous, so FastAPI runs each request on its worker thread
pool; the shared ``ProfileService`` is safe for that.
"""

from fastapi import APIRouter, Depends, Path, Query

from src.profile_service.api.http.deps import get_profile_service
from src.profile_service.core.services import ProfileService
from src.profile_service.entities.user_profile import UserProfile, UserProfileCandidate

router = APIRouter(prefix="/users", tags=["users"])

# ids are a 4-byte serial column
MAX_USER_ID = 2_147_483_647


@router.post("", response_model=UserProfile, status_code=201)
def create_user(
    candidate: UserProfileCandidate,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Create a user profile."""
    return service.create(candidate)


@router.get("", response_model=list[UserProfile])
def list_users(
    service: ProfileService = Depends(get_profile_service),
) -> list[UserProfile]:
    """List all user profiles, newest first."""
    return service.list()


# Declared before /{user_id} so "search" is not parsed as an id
@router.get("/search", response_model=list[UserProfile])
def search_users(
    q: str | None = Query(default=None, description="Substring to search for"),
    service: ProfileService = Depends(get_profile_service),
) -> list[UserProfile]:
    """Case-insensitive substring search over username, email and bio."""
    return service.search(q)


@router.get("/{user_id}", response_model=UserProfile)
def get_user(
    user_id: int = Path(ge=0, le=MAX_USER_ID),
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Get a user profile by ID."""
    return service.get(user_id)


@router.put("/{user_id}", response_model=UserProfile, response_model_exclude_none=True)
def update_user(
    candidate: UserProfileCandidate,
    user_id: int = Path(ge=0, le=MAX_USER_ID),
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Replace username, email and bio of a user profile."""
    return service.update(user_id, candidate)
