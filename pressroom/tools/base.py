from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from pressroom.errors import ProviderError, TransportError
from pressroom.models.schemas import SearchConfig, SearchResult

# Bing sends 7 fractional digits; fromisoformat before 3.11 takes only 3 or 6.
_FRACTION = re.compile(r"\.(\d+)")


class SearchProvider(Protocol):
    """One keyword-search backend.

    ``search`` returns unanalyzed results (at most ``config.max_results``) or
    raises ``ConfigurationError``, ``ProviderError`` or ``TransportError``.
    """

    name: str

    async def search(self, config: SearchConfig) -> list[SearchResult]:
        ...


def new_result_id() -> str:
    return f"result-{uuid.uuid4().hex}"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_publish_date(raw: str | None) -> str:
    """Normalize a provider timestamp to ISO 8601, defaulting to now."""
    if not raw:
        return now_iso()
    try:
        text = raw.strip().replace("Z", "+00:00")
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return now_iso()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.isoformat()


async def fetch_json(
    provider: str,
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = 30.0,
) -> dict[str, Any]:
    """GET a provider endpoint, translating httpx failures into provider errors."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url, params=params, headers=headers or {})
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ProviderError(provider, e.response.status_code) from e
    except httpx.HTTPError as e:
        # Timeouts, connection and protocol errors.
        raise TransportError(provider, str(e) or type(e).__name__) from e

    try:
        payload = response.json()
    except ValueError as e:
        raise ProviderError(provider, response.status_code, "invalid JSON body") from e
    return payload if isinstance(payload, dict) else {}
