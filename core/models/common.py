# =============================================================================
# core/models/common.py - Response Envelope
# =============================================================================
# Every successful response shares one shape:
#   {"success": true, "data": ..., "message"?: str, "pagination"?: {...}}
#
# Errors use the envelope built in app/exceptions.py.
# =============================================================================

import math
from typing import Any

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """
    Pagination metadata for list endpoints.

    Example:
        {
            "page": 2,
            "limit": 20,
            "total": 45,
            "total_pages": 3,
            "has_next_page": true,
            "has_previous_page": true
        }
    """

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def from_counts(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


def success_response(
    data: Any,
    message: str | None = None,
    pagination: Pagination | None = None,
) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination.model_dump()
    return body
