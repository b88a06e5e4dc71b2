from __future__ import annotations

import time
from dataclasses import dataclass, field

from pressroom.config import Settings
from pressroom.errors import ProviderUnavailable
from pressroom.models.schemas import SearchConfig, SearchResult
from pressroom.services import logger as log_service
from pressroom.tools.base import SearchProvider
from pressroom.tools.bing_search import BingSearchProvider
from pressroom.tools.gnews_search import GNewsSearchProvider
from pressroom.tools.mock_search import SyntheticSearchProvider
from pressroom.tools.news_api_search import NewsApiSearchProvider


@dataclass
class SearchOutcome:
    results: list[SearchResult]
    provider: str
    fallback_reasons: list[str] = field(default_factory=list)

    @property
    def is_synthetic(self) -> bool:
        return self.provider == SyntheticSearchProvider.name


def build_providers(settings: Settings) -> list[SearchProvider]:
    """Configured providers in priority order: Bing, NewsAPI, GNews."""
    timeout = settings.search_timeout_seconds
    providers: list[SearchProvider] = []
    if settings.bing_api_key:
        providers.append(
            BingSearchProvider(
                api_key=settings.bing_api_key,
                endpoint=settings.bing_endpoint,
                query_suffix=settings.search_query_suffix,
                timeout=timeout,
            )
        )
    if settings.news_api_key:
        providers.append(NewsApiSearchProvider(api_key=settings.news_api_key, timeout=timeout))
    if settings.gnews_api_key:
        providers.append(GNewsSearchProvider(api_key=settings.gnews_api_key, timeout=timeout))
    return providers


def mark_duplicates(results: list[SearchResult]) -> list[SearchResult]:
    """Flag results whose URL already appeared earlier in the list."""
    seen: set[str] = set()
    marked: list[SearchResult] = []
    for result in results:
        key = result.url.strip().rstrip("/").lower()
        if key and key in seen:
            marked.append(result.model_copy(update={"is_duplicate": True}))
            continue
        seen.add(key)
        marked.append(result)
    return marked


class SearchOrchestrator:
    """Tries providers in order; the first non-empty answer wins.

    Provider failures are logged and skipped. When nothing answers, results
    come from the synthetic generator so a search never fails only because
    external APIs are missing or down.
    """

    def __init__(
        self,
        providers: list[SearchProvider],
        *,
        fallback: SyntheticSearchProvider | None = None,
    ) -> None:
        self.providers = list(providers)
        self.fallback = fallback or SyntheticSearchProvider()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchOrchestrator":
        return cls(build_providers(settings))

    async def search(self, config: SearchConfig) -> SearchOutcome:
        reasons: list[str] = []

        for provider in self.providers:
            t0 = time.monotonic()
            try:
                results = await provider.search(config)
            except Exception as e:
                if isinstance(e, ProviderUnavailable):
                    reason = e.message
                else:
                    reason = f"{provider.name}: {type(e).__name__}: {e}"
                log_service.log_provider_call(
                    provider.name,
                    "error",
                    duration_ms=int((time.monotonic() - t0) * 1000),
                    error=reason,
                )
                reasons.append(reason)
                continue

            log_service.log_provider_call(
                provider.name,
                "success",
                result_count=len(results),
                duration_ms=int((time.monotonic() - t0) * 1000),
            )
            if results:
                return SearchOutcome(
                    results=mark_duplicates(results[: config.max_results]),
                    provider=provider.name,
                    fallback_reasons=reasons,
                )
            reasons.append(f"{provider.name}: no results")

        if not self.providers:
            reasons.append("no search providers configured")

        log_service.log_event(
            event_type="search_fallback",
            message="Using synthetic results",
            query=config.query[:100],
            reasons=reasons,
        )
        results = await self.fallback.search(config)
        return SearchOutcome(
            results=results[: config.max_results],
            provider=self.fallback.name,
            fallback_reasons=reasons,
        )
