from __future__ import annotations

from typing import Any

from pressroom.errors import ConfigurationError
from pressroom.models.schemas import SearchConfig, SearchResult
from pressroom.tools.base import fetch_json, new_result_id, normalize_publish_date
from pressroom.tools.content_type import classify_content_type
from pressroom.tools.web_utils import source_from_url

GNEWS_API_URL = "https://gnews.io/api/v4/search"
MAX_PAGE_SIZE = 100


class GNewsSearchProvider:
    """Search news articles using the GNews API."""

    name = "gnews"

    def __init__(self, *, api_key: str, lang: str = "en", timeout: float = 30.0) -> None:
        self._api_key = api_key
        self._lang = lang
        self._timeout = timeout

    async def search(self, config: SearchConfig) -> list[SearchResult]:
        if not self._api_key:
            raise ConfigurationError(self.name, "GNEWS_API_KEY is not configured")

        params: dict[str, Any] = {
            "q": config.query,
            "lang": self._lang,
            "max": min(config.max_results, MAX_PAGE_SIZE),
            "apikey": self._api_key,
        }
        if config.date_from:
            params["from"] = f"{config.date_from.isoformat()}T00:00:00Z"
        if config.date_to:
            params["to"] = f"{config.date_to.isoformat()}T23:59:59Z"

        payload = await fetch_json(self.name, GNEWS_API_URL, params=params, timeout=self._timeout)

        results: list[SearchResult] = []
        for item in (payload.get("articles") or [])[: config.max_results]:
            title = item.get("title", "") or ""
            url = item.get("url", "") or ""
            snippet = item.get("description", "") or ""
            results.append(
                SearchResult(
                    id=new_result_id(),
                    title=title,
                    url=url,
                    source=(item.get("source") or {}).get("name") or source_from_url(url),
                    publish_date=normalize_publish_date(item.get("publishedAt")),
                    snippet=snippet,
                    content_type=classify_content_type(title, snippet),
                )
            )
        return results
