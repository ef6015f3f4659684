# =============================================================================
# core/services/profile_service.py - User Profiles
# =============================================================================
# Reads and writes the profiles table. Public profiles expose a fixed
# column subset; the caller's own profile returns every column.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, utc_now, utc_now_iso
from core.models.listing import ListingStatus
from core.models.profile import PUBLIC_PROFILE_COLUMNS, ProfileStats, ProfileUpdate
from core.services.review_service import average_rating
from app.exceptions import NotFoundError

logger = logging.getLogger(__name__)

RECENT_REVIEW_COUNT = 5


class ProfileService:
    """Service for profile operations."""

    @staticmethod
    def get_own_profile(user_id: str | UUID, email: str | None = None) -> dict[str, Any]:
        """
        The caller's full profile.

        A user who signed up but whose profile row hasn't been created yet
        gets a minimal profile built from the token.
        """
        profile = SupabaseClient.fetch_by_id("profiles", user_id)
        if profile:
            return profile

        logger.warning(f"No profile row for authenticated user {user_id}")
        return {"id": normalize_uuid(user_id), "email": email, "full_name": None, "avatar_url": None}

    @staticmethod
    def update_profile(user_id: str | UUID, payload: ProfileUpdate) -> dict[str, Any]:
        """
        Update the caller's own profile.

        Raises:
            NotFoundError: If the profile row doesn't exist
        """
        changes = payload.to_row()
        if not changes:
            profile = SupabaseClient.fetch_by_id("profiles", user_id)
            if not profile:
                raise NotFoundError("Profile", normalize_uuid(user_id))
            return profile

        changes["updated_at"] = utc_now_iso()
        updated = SupabaseClient.update_row("profiles", user_id, changes)
        if updated is None:
            raise NotFoundError("Profile", normalize_uuid(user_id))

        logger.info(f"Updated profile {user_id} fields={sorted(changes)}")
        return updated

    @staticmethod
    def compute_stats(profile: dict[str, Any]) -> ProfileStats:
        """Active listing count, rating summary, and account age."""
        user_id = profile["id"]
        client = SupabaseClient.get_client()

        listings = (
            client.table("listings")
            .select("id", count="exact")
            .eq("owner_id", str(user_id))
            .eq("status", ListingStatus.ACTIVE.value)
            .execute()
        )
        reviews = (
            client.table("reviews")
            .select("rating")
            .eq("reviewee_id", str(user_id))
            .execute()
        ).data or []

        created_at = parse_timestamp(profile.get("created_at"))
        years_active = max(1, (utc_now() - created_at).days // 365) if created_at else 0

        return ProfileStats(
            total_listings=listings.count or 0,
            avg_rating=average_rating([r["rating"] for r in reviews if r.get("rating") is not None]),
            review_count=len(reviews),
            years_active=years_active,
        )

    @staticmethod
    def recent_reviews(user_id: str | UUID) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("reviews")
            .select(
                "id, rating, comment, created_at, "
                "reviewer:profiles!reviews_reviewer_id_fkey(id, full_name, avatar_url)"
            )
            .eq("reviewee_id", normalize_uuid(user_id))
            .order("created_at", desc=True)
            .limit(RECENT_REVIEW_COUNT)
            .execute()
        )
        return response.data or []

    @staticmethod
    def get_public_profile(
        user_id: str | UUID,
        include_stats: bool = False,
        include_reviews: bool = False,
    ) -> dict[str, Any]:
        """
        Public view of a user.

        Raises:
            NotFoundError: If the user doesn't exist
        """
        profile = SupabaseClient.fetch_by_id("profiles", user_id, columns=PUBLIC_PROFILE_COLUMNS)
        if not profile:
            raise NotFoundError("User", normalize_uuid(user_id))

        if include_stats:
            profile["stats"] = ProfileService.compute_stats(profile).model_dump()
        if include_reviews:
            profile["recent_reviews"] = ProfileService.recent_reviews(user_id)
        return profile
