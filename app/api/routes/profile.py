from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.dependencies import get_database
from app.features.database.client import DatabaseClient
from app.features.journal.models import ProfileUpdate, UserProfile

router = APIRouter(tags=["Profile"])


class ProfileResponse(BaseModel):
    profile: UserProfile
    display_name: str


@router.get("/profile/{user_id}", response_model=ProfileResponse)
def get_profile(
    user_id: str,
    email: Optional[str] = Query(default=None, max_length=320),
    db: DatabaseClient = Depends(get_database),
) -> ProfileResponse:
    """Return the user's profile, creating it from ``email`` if it does not exist yet."""
    profile = db.profiles.get_or_create(user_id, email=email)
    return ProfileResponse(profile=profile, display_name=profile.resolved_name)


@router.patch("/profile/{user_id}", response_model=ProfileResponse)
def update_profile(
    user_id: str,
    changes: ProfileUpdate,
    db: DatabaseClient = Depends(get_database),
) -> ProfileResponse:
    profile = db.profiles.update(user_id, changes.display_name.strip())
    return ProfileResponse(profile=profile, display_name=profile.resolved_name)
