from __future__ import annotations

from typing import Any

from pressroom.errors import ConfigurationError
from pressroom.models.schemas import SearchConfig, SearchResult
from pressroom.tools.base import fetch_json, new_result_id, normalize_publish_date
from pressroom.tools.content_type import classify_content_type
from pressroom.tools.web_utils import clean_snippet, source_from_url

NEWS_API_URL = "https://newsapi.org/v2/everything"
MUSIC_PRESS_SOURCES = ("pitchfork", "rolling-stone", "the-guardian", "nme")
MAX_PAGE_SIZE = 100


class NewsApiSearchProvider:
    """NewsAPI.org ``/everything`` restricted to music-press outlets."""

    name = "newsapi"

    def __init__(self, *, api_key: str, timeout: float = 30.0) -> None:
        self._api_key = api_key
        self._timeout = timeout

    async def search(self, config: SearchConfig) -> list[SearchResult]:
        if not self._api_key:
            raise ConfigurationError(self.name, "NEWS_API_KEY is not configured")

        sources = config.sources or list(MUSIC_PRESS_SOURCES)
        params: dict[str, Any] = {
            "q": f"{config.query} music",
            "sources": ",".join(sources),
            "sortBy": "relevancy",
            "pageSize": min(config.max_results, MAX_PAGE_SIZE),
            "apiKey": self._api_key,
        }
        if config.date_from:
            params["from"] = config.date_from.isoformat()
        if config.date_to:
            params["to"] = config.date_to.isoformat()

        payload = await fetch_json(self.name, NEWS_API_URL, params=params, timeout=self._timeout)

        results: list[SearchResult] = []
        for article in (payload.get("articles") or [])[: config.max_results]:
            title = article.get("title", "") or ""
            url = article.get("url", "") or ""
            snippet = article.get("description") or clean_snippet(article.get("content") or "")
            source_name = (article.get("source") or {}).get("name")
            results.append(
                SearchResult(
                    id=new_result_id(),
                    title=title,
                    url=url,
                    source=source_name or source_from_url(url),
                    publish_date=normalize_publish_date(article.get("publishedAt")),
                    snippet=snippet,
                    content_type=classify_content_type(title, snippet),
                )
            )
        return results
