# =============================================================================
# core/services/category_service.py - Category Tree
# =============================================================================
# Categories form a shallow tree (parent_id). Listing counts are computed
# from one query over the listings of the returned categories.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.models.category import CategoryCreate
from core.models.listing import ListingStatus
from app.exceptions import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for category operations."""

    @staticmethod
    def _listing_counts(category_ids: list[str]) -> dict[str, dict[str, int]]:
        client = SupabaseClient.get_client()
        rows = (
            client.table("listings")
            .select("category_id, status")
            .in_("category_id", category_ids)
            .execute()
        ).data or []

        counts = {cid: {"listings": 0, "active_listings": 0} for cid in category_ids}
        for row in rows:
            bucket = counts.get(str(row.get("category_id")))
            if bucket is None:
                continue
            bucket["listings"] += 1
            if row.get("status") == ListingStatus.ACTIVE.value:
                bucket["active_listings"] += 1
        return counts

    @staticmethod
    def _children(parent_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
        client = SupabaseClient.get_client()
        rows = (
            client.table("categories")
            .select("*")
            .in_("parent_id", parent_ids)
            .order("name")
            .execute()
        ).data or []

        grouped: dict[str, list[dict[str, Any]]] = {pid: [] for pid in parent_ids}
        for row in rows:
            grouped.setdefault(str(row.get("parent_id")), []).append(row)
        return grouped

    @staticmethod
    def list_categories(
        parent_id: str | UUID | None = None,
        include_children: bool = False,
        include_counts: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Categories under parent_id, or root categories when omitted.

        Sorted by name.
        """
        client = SupabaseClient.get_client()
        query = client.table("categories").select("*")
        if parent_id:
            query = query.eq("parent_id", normalize_uuid(parent_id))
        else:
            query = query.is_("parent_id", "null")
        categories = query.order("name").execute().data or []
        if not categories:
            return []

        ids = [str(c["id"]) for c in categories]
        if include_children:
            children = CategoryService._children(ids)
            for category in categories:
                category["children"] = children.get(str(category["id"]), [])
        if include_counts:
            counts = CategoryService._listing_counts(ids)
            for category in categories:
                category["counts"] = counts[str(category["id"])]
        return categories

    @staticmethod
    def get_category(category_id: str | UUID) -> dict[str, Any]:
        """
        A category with its children, parent and listing counts.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        category = SupabaseClient.fetch_by_id("categories", category_id)
        if not category:
            raise NotFoundError("Category", normalize_uuid(category_id))

        cid = str(category["id"])
        category["children"] = CategoryService._children([cid]).get(cid, [])
        category["parent"] = (
            SupabaseClient.fetch_by_id("categories", category["parent_id"])
            if category.get("parent_id") else None
        )
        category["counts"] = CategoryService._listing_counts([cid])[cid]
        return category

    @staticmethod
    def create_category(payload: CategoryCreate) -> dict[str, Any]:
        """
        Create a category.

        Raises:
            ConflictError: Slug already taken
            BadRequestError: Parent category doesn't exist
        """
        if SupabaseClient.fetch_first("categories", {"slug": payload.slug}, columns="id"):
            raise ConflictError("Category with this slug already exists", details={"slug": payload.slug})

        if payload.parent_id and not SupabaseClient.fetch_by_id("categories", payload.parent_id, columns="id"):
            raise BadRequestError("Invalid parent category ID")

        category = SupabaseClient.insert_row("categories", payload.model_dump(mode="json", exclude_none=True))
        logger.info(f"Created category {category.get('id')} slug={payload.slug}")
        return category
