"""
Profiles Repository - user profile lookups.

Profiles only carry what the reports need: a display name used to address
the patient, with the email as a fallback.
"""

import logging
from typing import Optional

from app.features.journal.models import UserProfile
from app.shared.constants import DEFAULT_PATIENT_NAME, PROFILES_TABLE
from app.shared.errors import DatabaseError, NotFoundError

logger = logging.getLogger("Plusnote.Database.Profiles")


class ProfilesRepository:
    """Repository for profile operations."""

    def __init__(self, client):
        self.client = client

    def get(self, user_id: str) -> Optional[UserProfile]:
        try:
            result = self.client.table(PROFILES_TABLE).select("*").eq("user_id", user_id).execute()
        except Exception as e:
            logger.error(f"Error fetching profile: {e}")
            raise DatabaseError("Failed to fetch profile", operation="select") from e
        return UserProfile.model_validate(result.data[0]) if result.data else None

    def create(self, user_id: str, email: Optional[str] = None, display_name: Optional[str] = None) -> UserProfile:
        """Create a profile; the display name defaults to the email's local part."""
        if not display_name:
            display_name = email.split("@")[0] if email else DEFAULT_PATIENT_NAME
        try:
            result = self.client.table(PROFILES_TABLE).insert({
                "user_id": user_id,
                "email": email,
                "display_name": display_name,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating profile: {e}")
            raise DatabaseError("Failed to create profile", operation="insert") from e
        if not result.data:
            raise DatabaseError("Insert returned no row", operation="insert")
        return UserProfile.model_validate(result.data[0])

    def get_or_create(self, user_id: str, email: Optional[str] = None) -> UserProfile:
        """Fetch the profile, creating it on first access."""
        profile = self.get(user_id)
        if profile is not None:
            return profile
        logger.info("Creating profile on first fetch", extra={"user_id": user_id})
        return self.create(user_id, email=email)

    def update(self, user_id: str, display_name: str) -> UserProfile:
        try:
            result = self.client.table(PROFILES_TABLE).update(
                {"display_name": display_name}
            ).eq("user_id", user_id).execute()
        except Exception as e:
            logger.error(f"Error updating profile: {e}")
            raise DatabaseError("Failed to update profile", operation="update") from e
        if not result.data:
            raise NotFoundError("Profile not found")
        return UserProfile.model_validate(result.data[0])

    def display_name_for(self, user_id: str) -> str:
        """Name to address the patient by; 'Patient' when no profile exists."""
        profile = self.get(user_id)
        return profile.resolved_name if profile else DEFAULT_PATIENT_NAME
