from __future__ import annotations

import asyncio
from typing import Any

from supabase import Client, create_client

from pressroom.config import settings

HISTORY_TABLE = "search_history"
USAGE_TABLE = "usage_limits"


def get_client() -> Client:
    return create_client(settings.supabase_url, settings.supabase_anon_key)


_client: Client | None = None


def client() -> Client:
    global _client
    if _client is None:
        _client = get_client()
    return _client


async def _execute(query: Any) -> Any:
    """Run blocking Supabase query execution in a worker thread."""
    return await asyncio.to_thread(query.execute)


def _first(result: Any) -> dict[str, Any] | None:
    return result.data[0] if result.data else None


# --- Auth ---


async def get_user_id(access_token: str) -> str | None:
    """Resolve a Supabase access token to its user id."""
    response = await asyncio.to_thread(client().auth.get_user, access_token)
    user = getattr(response, "user", None) if response else None
    return str(user.id) if user else None


# --- Search history ---


async def create_search(
    user_id: str,
    query: str,
    config: dict[str, Any],
    results: list[dict[str, Any]],
) -> dict[str, Any] | None:
    row = {
        "user_id": user_id,
        "query": query,
        "config": config,
        "result_count": len(results),
        "results": results,
    }
    result = await _execute(client().table(HISTORY_TABLE).insert(row))
    return _first(result)


async def list_searches(user_id: str, limit: int) -> list[dict[str, Any]]:
    result = await _execute(
        client()
        .table(HISTORY_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
    )
    return result.data or []


async def get_search(search_id: str, user_id: str) -> dict[str, Any] | None:
    result = await _execute(
        client().table(HISTORY_TABLE).select("*").eq("id", search_id).eq("user_id", user_id)
    )
    return _first(result)


async def update_search(search_id: str, user_id: str, **fields: Any) -> dict[str, Any] | None:
    result = await _execute(
        client().table(HISTORY_TABLE).update(fields).eq("id", search_id).eq("user_id", user_id)
    )
    return _first(result)


async def get_shared_search(share_token: str) -> dict[str, Any] | None:
    result = await _execute(
        client()
        .table(HISTORY_TABLE)
        .select("*")
        .eq("share_token", share_token)
        .eq("shared", True)
    )
    return _first(result)


async def delete_search(search_id: str, user_id: str) -> bool:
    result = await _execute(
        client().table(HISTORY_TABLE).delete().eq("id", search_id).eq("user_id", user_id)
    )
    return bool(result.data)


# --- Usage limits ---


async def get_usage(user_id: str) -> dict[str, Any] | None:
    result = await _execute(client().table(USAGE_TABLE).select("*").eq("user_id", user_id))
    return _first(result)


async def create_usage(row: dict[str, Any]) -> dict[str, Any] | None:
    result = await _execute(client().table(USAGE_TABLE).insert(row))
    return _first(result)


async def update_usage(user_id: str, **fields: Any) -> dict[str, Any] | None:
    result = await _execute(client().table(USAGE_TABLE).update(fields).eq("user_id", user_id))
    return _first(result)
