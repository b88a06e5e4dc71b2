"""Monthly search and export quotas backed by the ``usage_limits`` table."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pressroom.config import settings
from pressroom.errors import QuotaExceededError
from pressroom.models.schemas import UsageLimits
from pressroom.services import logger as log_service
from pressroom.services import supabase as db


def needs_reset(last_reset: datetime, now: datetime) -> bool:
    """Counters reset when the calendar month or year has changed."""
    return last_reset.month != now.month or last_reset.year != now.year


def _default_row(user_id: str, now: datetime) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "searches_this_month": 0,
        "max_searches": settings.default_max_searches,
        "exports_this_month": 0,
        "max_exports": settings.default_max_exports,
        "last_reset": now.isoformat(),
    }


def _to_limits(row: dict[str, Any]) -> UsageLimits:
    return UsageLimits(
        searches_this_month=row.get("searches_this_month") or 0,
        max_searches=row.get("max_searches") or 0,
        exports_this_month=row.get("exports_this_month") or 0,
        max_exports=row.get("max_exports") or 0,
        last_reset=row["last_reset"],
    )


async def get_limits(user_id: str, now: datetime | None = None) -> UsageLimits:
    """Fetch (creating or resetting as needed) the user's usage record."""
    now = now or datetime.now(timezone.utc)
    row = await db.get_usage(user_id)

    if row is None:
        defaults = _default_row(user_id, now)
        row = await db.create_usage(defaults) or defaults
        log_service.log_db_operation("insert", db.USAGE_TABLE, "success", details=user_id)
        return _to_limits(row)

    limits = _to_limits(row)
    if needs_reset(limits.last_reset, now):
        fields = {
            "searches_this_month": 0,
            "exports_this_month": 0,
            "last_reset": now.isoformat(),
        }
        row = await db.update_usage(user_id, **fields) or {**row, **fields}
        log_service.log_event(
            event_type="usage_reset",
            message="Monthly usage counters reset",
            user_id=user_id,
        )
        limits = _to_limits(row)
    return limits


async def check_searches(user_id: str) -> UsageLimits:
    """Raise QuotaExceededError when the user has no searches left."""
    limits = await get_limits(user_id)
    if limits.searches_this_month >= limits.max_searches:
        raise QuotaExceededError("searches", limits.max_searches)
    return limits


async def record_search(user_id: str, limits: UsageLimits) -> UsageLimits:
    """Count one completed search against the limits read by ``check_searches``."""
    count = limits.searches_this_month + 1
    await db.update_usage(user_id, searches_this_month=count)
    return limits.model_copy(update={"searches_this_month": count})


async def check_exports(user_id: str) -> UsageLimits:
    limits = await get_limits(user_id)
    if limits.exports_this_month >= limits.max_exports:
        raise QuotaExceededError("exports", limits.max_exports)
    return limits


async def record_export(user_id: str, limits: UsageLimits) -> UsageLimits:
    count = limits.exports_this_month + 1
    await db.update_usage(user_id, exports_this_month=count)
    return limits.model_copy(update={"exports_this_month": count})
