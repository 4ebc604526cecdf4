"""Service for the per-user ``profiles`` table."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import ProfileNotFoundError

logger = logging.getLogger(__name__)

PROFILE_TABLE = "profiles"


class ProfileService:
    """Read and write profile rows in Supabase."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def create_profile(self, user_id: str, email: str, full_name: str) -> Optional[Dict[str, Any]]:
        response = (
            self.client.table(PROFILE_TABLE)
            .insert([{"user_id": user_id, "email": email, "full_name": full_name}])
            .execute()
        )
        data = response.data or []
        return data[0] if data else None

    def find_profile(self, user_id: str, columns: str = "*") -> Optional[Dict[str, Any]]:
        """
        Fetch the profile row owned by an auth user.

        Args:
            user_id: Supabase auth user id
            columns: PostgREST column list

        Returns:
            Profile record or None if the user has no profile

        Raises:
            Whatever the Supabase client raises on backend errors
        """
        # limit(1) instead of single(): an empty result is not an error here
        response = (
            self.client.table(PROFILE_TABLE)
            .select(columns)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        data = response.data or []
        return data[0] if data else None

    def require_profile(self, user_id: str, columns: str = "id") -> Dict[str, Any]:
        """Like find_profile, but a missing row or failed lookup raises ProfileNotFoundError."""
        try:
            profile = self.find_profile(user_id, columns)
        except Exception as exc:
            logger.error(f"Profile lookup failed for user {user_id}: {exc}")
            raise ProfileNotFoundError() from exc
        if not profile or profile.get("id") is None:
            raise ProfileNotFoundError()
        return profile

    def update_profile(
        self,
        profile_id: Any,
        *,
        full_name: Optional[str],
        phone: Optional[str],
        bio: Optional[str],
        skills: List[str],
        interests: List[str],
    ) -> None:
        update_fields = {
            "full_name": full_name,
            "phone": phone,
            "bio": bio,
            "skills": list(skills),
            "interests": list(interests),
        }
        self.client.table(PROFILE_TABLE).update(update_fields).eq("id", profile_id).execute()
