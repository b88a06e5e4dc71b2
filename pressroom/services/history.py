"""Search history persistence and public share links."""
from __future__ import annotations

import secrets

from pressroom.config import settings
from pressroom.errors import NotFoundError
from pressroom.models.schemas import SearchConfig, SearchHistoryEntry, SearchResult, ShareResponse
from pressroom.services import logger as log_service
from pressroom.services import supabase as db

SHARE_TOKEN_BYTES = 16


def generate_share_token() -> str:
    """32 lowercase hex characters from a cryptographically secure source."""
    return secrets.token_hex(SHARE_TOKEN_BYTES)


def share_url(token: str) -> str:
    return f"{settings.app_url.rstrip('/')}/shared/{token}"


def _dump_results(results: list[SearchResult]) -> list[dict]:
    return [r.model_dump(mode="json", by_alias=True) for r in results]


async def save_search(
    user_id: str, config: SearchConfig, results: list[SearchResult]
) -> str | None:
    """Record a completed search. Returns the new history id."""
    row = await db.create_search(
        user_id,
        config.query,
        config.model_dump(mode="json", by_alias=True),
        _dump_results(results),
    )
    if row is None:
        log_service.log_db_operation("insert", db.HISTORY_TABLE, "failed", error="no row returned")
        return None
    log_service.log_db_operation("insert", db.HISTORY_TABLE, "success", details=str(row["id"]))
    return str(row["id"])


async def save_results(search_id: str, user_id: str, results: list[SearchResult]) -> None:
    """Replace the stored result snapshot, e.g. once analysis has finished."""
    await db.update_search(
        search_id,
        user_id,
        results=_dump_results(results),
        result_count=len(results),
    )
    log_service.log_db_operation("update", db.HISTORY_TABLE, "success", details=search_id)


async def get_entry(search_id: str, user_id: str) -> SearchHistoryEntry:
    row = await db.get_search(search_id, user_id)
    if row is None:
        raise NotFoundError("Search not found")
    return SearchHistoryEntry.from_row(row)


async def list_history(user_id: str) -> list[SearchHistoryEntry]:
    rows = await db.list_searches(user_id, settings.history_limit)
    return [SearchHistoryEntry.from_row(row) for row in rows]


async def delete_entry(search_id: str, user_id: str) -> None:
    if not await db.delete_search(search_id, user_id):
        raise NotFoundError("Search not found")
    log_service.log_db_operation("delete", db.HISTORY_TABLE, "success", details=search_id)


async def share(search_id: str, user_id: str) -> ShareResponse:
    token = generate_share_token()
    row = await db.update_search(search_id, user_id, shared=True, share_token=token)
    if row is None:
        raise NotFoundError("Search not found")
    log_service.log_event(
        event_type="search_shared",
        message="Search shared",
        search_id=search_id,
        user_id=user_id,
    )
    return ShareResponse(share_token=token, share_url=share_url(token))


async def unshare(search_id: str, user_id: str) -> None:
    row = await db.update_search(search_id, user_id, shared=False, share_token=None)
    if row is None:
        raise NotFoundError("Search not found")


async def get_shared(token: str) -> SearchHistoryEntry:
    row = await db.get_shared_search(token)
    if row is None:
        raise NotFoundError("Shared search not found")
    return SearchHistoryEntry.from_row(row)
