from __future__ import annotations

from typing import Any

from pressroom.errors import ConfigurationError
from pressroom.models.schemas import SearchConfig, SearchResult
from pressroom.tools.base import fetch_json, new_result_id, normalize_publish_date
from pressroom.tools.content_type import classify_content_type
from pressroom.tools.web_utils import source_from_url

BING_SEARCH_PATH = "/v7.0/search"


class BingSearchProvider:
    """Bing Web Search v7, biased toward music-press pages."""

    name = "bing"

    def __init__(
        self,
        *,
        api_key: str,
        endpoint: str = "https://api.bing.microsoft.com",
        query_suffix: str = "music press review article",
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._query_suffix = query_suffix
        self._timeout = timeout

    @property
    def search_url(self) -> str:
        if BING_SEARCH_PATH in self._endpoint:
            return self._endpoint
        return self._endpoint.rstrip("/") + BING_SEARCH_PATH

    async def search(self, config: SearchConfig) -> list[SearchResult]:
        if not self._api_key:
            raise ConfigurationError(self.name, "BING_API_KEY is not configured")

        params: dict[str, Any] = {
            "q": f"{config.query} {self._query_suffix}".strip(),
            "count": config.max_results,
            "responseFilter": "WebPages",
        }
        if config.date_from or config.date_to:
            # Bing only offers Day/Week/Month buckets.
            params["freshness"] = "Month"

        payload = await fetch_json(
            self.name,
            self.search_url,
            params=params,
            headers={"Ocp-Apim-Subscription-Key": self._api_key},
            timeout=self._timeout,
        )

        raw_results = (payload.get("webPages") or {}).get("value") or []
        results: list[SearchResult] = []
        for item in raw_results[: config.max_results]:
            title = item.get("name", "") or ""
            snippet = item.get("snippet", "") or ""
            url = item.get("url", "") or ""
            results.append(
                SearchResult(
                    id=new_result_id(),
                    title=title,
                    url=url,
                    source=source_from_url(url, item.get("displayUrl")),
                    publish_date=normalize_publish_date(item.get("datePublished")),
                    snippet=snippet,
                    content_type=classify_content_type(title, snippet),
                )
            )
        return results
