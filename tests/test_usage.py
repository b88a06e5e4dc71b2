from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from pressroom.errors import QuotaExceededError
from pressroom.services import usage
from pressroom.services.usage import needs_reset

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _row(**overrides):
    row = {
        "user_id": "user-1",
        "searches_this_month": 3,
        "max_searches": 50,
        "exports_this_month": 1,
        "max_exports": 20,
        "last_reset": "2024-03-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


@pytest.mark.parametrize(
    "last_reset,expected",
    [
        (datetime(2024, 3, 1, tzinfo=timezone.utc), False),
        (datetime(2024, 2, 29, tzinfo=timezone.utc), True),
        (datetime(2023, 3, 20, tzinfo=timezone.utc), True),
    ],
)
def test_needs_reset(last_reset, expected):
    assert needs_reset(last_reset, NOW) is expected


@pytest.mark.asyncio
async def test_get_limits_creates_missing_row():
    with (
        patch("pressroom.services.supabase.get_usage", new=AsyncMock(return_value=None)),
        patch(
            "pressroom.services.supabase.create_usage",
            new=AsyncMock(side_effect=lambda row: row),
        ) as create,
    ):
        limits = await usage.get_limits("user-1", now=NOW)

    created = create.await_args.args[0]
    assert created["user_id"] == "user-1"
    assert limits.searches_this_month == 0
    assert limits.max_searches == created["max_searches"]


@pytest.mark.asyncio
async def test_get_limits_resets_counters_in_new_month():
    stale = _row(searches_this_month=49, exports_this_month=7, last_reset="2024-02-10T00:00:00+00:00")

    with (
        patch("pressroom.services.supabase.get_usage", new=AsyncMock(return_value=stale)),
        patch(
            "pressroom.services.supabase.update_usage",
            new=AsyncMock(side_effect=lambda user_id, **fields: {**stale, **fields}),
        ) as update,
    ):
        limits = await usage.get_limits("user-1", now=NOW)

    assert update.await_args.kwargs["searches_this_month"] == 0
    assert limits.searches_this_month == 0
    assert limits.exports_this_month == 0
    assert limits.last_reset == NOW


@pytest.mark.asyncio
async def test_get_limits_keeps_counters_within_month():
    with (
        patch("pressroom.services.supabase.get_usage", new=AsyncMock(return_value=_row())),
        patch("pressroom.services.supabase.update_usage", new=AsyncMock()) as update,
    ):
        limits = await usage.get_limits("user-1", now=NOW)

    update.assert_not_awaited()
    assert limits.searches_this_month == 3


@pytest.mark.asyncio
async def test_check_searches_does_not_charge():
    limits = await _limits_from(_row())
    with (
        patch("pressroom.services.usage.get_limits", new=AsyncMock(return_value=limits)),
        patch("pressroom.services.supabase.update_usage", new=AsyncMock()) as update,
    ):
        checked = await usage.check_searches("user-1")

    update.assert_not_awaited()
    assert checked.searches_this_month == 3


@pytest.mark.asyncio
async def test_record_search_counts_one():
    limits = await _limits_from(_row())
    with patch("pressroom.services.supabase.update_usage", new=AsyncMock()) as update:
        updated = await usage.record_search("user-1", limits)

    update.assert_awaited_once_with("user-1", searches_this_month=4)
    assert updated.searches_this_month == 4


@pytest.mark.asyncio
async def test_check_searches_refuses_at_limit():
    limits = await _limits_from(_row(searches_this_month=50))
    with patch("pressroom.services.usage.get_limits", new=AsyncMock(return_value=limits)):
        with pytest.raises(QuotaExceededError) as exc_info:
            await usage.check_searches("user-1")

    assert exc_info.value.limit == 50
    assert exc_info.value.to_payload() == {"error": "Search limit reached", "limit": 50}


@pytest.mark.asyncio
async def test_check_exports_refuses_at_limit():
    limits = await _limits_from(_row(exports_this_month=20))
    with patch("pressroom.services.usage.get_limits", new=AsyncMock(return_value=limits)):
        with pytest.raises(QuotaExceededError) as exc_info:
            await usage.check_exports("user-1")

    assert exc_info.value.kind == "exports"
    assert exc_info.value.message == "Export limit reached"


@pytest.mark.asyncio
async def test_record_export_counts_one():
    limits = await _limits_from(_row())
    with patch("pressroom.services.supabase.update_usage", new=AsyncMock()) as update:
        updated = await usage.record_export("user-1", limits)

    update.assert_awaited_once_with("user-1", exports_this_month=2)
    assert updated.exports_this_month == 2


async def _limits_from(row):
    with (
        patch("pressroom.services.supabase.get_usage", new=AsyncMock(return_value=row)),
        patch("pressroom.services.supabase.update_usage", new=AsyncMock()),
    ):
        return await usage.get_limits("user-1", now=NOW)
