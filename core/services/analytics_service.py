# =============================================================================
# core/services/analytics_service.py - Personal Rental Analytics
# =============================================================================
# Summarises the caller's renting history over a timeframe:
#   - totals and an estimated saving versus buying each item
#   - favourite categories and monthly spend
#   - average rental duration
#   - their most common search terms
#
# Rows are loaded once and aggregated with pandas.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import pandas as pd

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now, utc_now_iso
from core.models.analytics import (
    AnalyticsQuery,
    CategoryUsage,
    MonthlySpend,
    PersonalAnalytics,
    RentalPatterns,
    SearchInsights,
    SearchTerm,
    UserStats,
)

logger = logging.getLogger(__name__)

# A rented item is assumed to cost about this many days of rent to buy
PURCHASE_PRICE_MULTIPLIER = 15
TOP_CATEGORIES = 5
TOP_SEARCH_TERMS = 10


def timeframe_start(months: int, now: datetime | None = None) -> datetime:
    """First day of the month `months` months before now."""
    now = now or utc_now()
    year, month = now.year, now.month - months
    while month <= 0:
        month += 12
        year -= 1
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _whole(value: float) -> int:
    return int(round(float(value)))


def bookings_frame(bookings: list[dict[str, Any]]) -> pd.DataFrame:
    """Flatten booking rows (with embedded listing/category) into a frame."""
    if not bookings:
        return pd.DataFrame()

    df = pd.DataFrame(bookings, columns=["id", "created_at", "start_date", "end_date", "total_price", "listing"])
    listing = df["listing"].map(lambda value: value if isinstance(value, dict) else {})

    df["total_price"] = pd.to_numeric(df["total_price"], errors="coerce").fillna(0.0)
    df["price_per_day"] = pd.to_numeric(listing.map(lambda l: l.get("price_per_day")), errors="coerce").fillna(0.0)
    df["category"] = listing.map(lambda l: (l.get("category") or {}).get("name") or "Other")
    df["month"] = pd.to_datetime(df["created_at"], utc=True, format="ISO8601").dt.strftime("%Y-%m")
    starts = pd.to_datetime(df["start_date"], format="ISO8601")
    ends = pd.to_datetime(df["end_date"], format="ISO8601")
    df["duration_days"] = (ends - starts).dt.days
    return df


def summarise_bookings(df: pd.DataFrame) -> tuple[UserStats, RentalPatterns]:
    if df.empty:
        return UserStats(), RentalPatterns()

    total_spent = df["total_price"].sum()
    total_rentals = len(df)
    purchase_cost = (df["price_per_day"] * PURCHASE_PRICE_MULTIPLIER).sum()
    savings = purchase_cost - total_spent

    stats = UserStats(
        total_rentals=total_rentals,
        total_spent=_whole(total_spent),
        total_savings=_whole(savings),
        avg_rental_price=_whole(total_spent / total_rentals),
        savings_rate=_whole(savings / purchase_cost * 100) if purchase_cost > 0 else 0,
    )

    favourites = df["category"].value_counts().head(TOP_CATEGORIES)
    monthly = df.groupby("month")["total_price"].sum().sort_index()
    patterns = RentalPatterns(
        favorite_categories=[CategoryUsage(category=name, count=int(count)) for name, count in favourites.items()],
        monthly_spending=[MonthlySpend(month=month, amount=_whole(amount)) for month, amount in monthly.items()],
        avg_rental_duration=_whole(df["duration_days"].fillna(0).mean()),
    )
    return stats, patterns


def summarise_searches(searches: list[dict[str, Any]], total_rentals: int) -> SearchInsights:
    if not searches:
        return SearchInsights()

    terms = pd.Series([(s.get("query") or "").lower() for s in searches])
    top = terms[terms != ""].value_counts().head(TOP_SEARCH_TERMS)
    return SearchInsights(
        total_searches=len(searches),
        top_search_terms=[SearchTerm(term=term, count=int(count)) for term, count in top.items()],
        search_to_booking_ratio=_whole(total_rentals / len(searches) * 100) if total_rentals else 0,
    )


class AnalyticsService:
    """Service for per-user analytics."""

    @staticmethod
    def personal(user_id: str | UUID, params: AnalyticsQuery) -> dict[str, Any]:
        uid = normalize_uuid(user_id)
        since = timeframe_start(params.months).isoformat()
        client = SupabaseClient.get_client()

        bookings = (
            client.table("bookings")
            .select(
                "id, created_at, start_date, end_date, total_price, status, "
                "listing:listings(title, price_per_day, category:categories(name))"
            )
            .eq("renter_id", uid)
            .gte("created_at", since)
            .order("created_at", desc=True)
            .execute()
        ).data or []
        searches = (
            client.table("search_analytics")
            .select("query, results_count, created_at")
            .eq("user_id", uid)
            .gte("created_at", since)
            .order("created_at", desc=True)
            .execute()
        ).data or []

        stats, patterns = summarise_bookings(bookings_frame(bookings))
        insights = summarise_searches(searches, stats.total_rentals)

        logger.debug(f"Personal analytics for {uid}: {len(bookings)} bookings, {len(searches)} searches")
        return PersonalAnalytics(
            user_stats=stats,
            rental_patterns=patterns,
            search_insights=insights,
            metadata={
                "timeframe": params.timeframe,
                "generated_at": utc_now_iso(),
                "user_id": uid,
                "data_points": len(bookings) + len(searches),
            },
        ).model_dump()
