from __future__ import annotations

from typing import Iterable

from pressroom.models.schemas import ALL, ContentTypeFilter, SearchResult, SentimentFilter


def matches(
    result: SearchResult,
    sentiment_filter: SentimentFilter = ALL,
    content_type_filter: ContentTypeFilter = ALL,
) -> bool:
    """Whether one result passes both filters.

    A result that has not been analysed yet only passes the ``all``
    sentiment filter.
    """
    if sentiment_filter != ALL:
        if result.analysis is None or result.analysis.sentiment != sentiment_filter:
            return False
    if content_type_filter != ALL and result.content_type != content_type_filter:
        return False
    return True


def filter_results(
    results: Iterable[SearchResult],
    sentiment_filter: SentimentFilter = ALL,
    content_type_filter: ContentTypeFilter = ALL,
) -> list[SearchResult]:
    return [r for r in results if matches(r, sentiment_filter, content_type_filter)]


def select_for_export(
    results: list[SearchResult],
    selected_ids: Iterable[str] = (),
) -> list[SearchResult]:
    """Selected results in display order, or all of them when nothing is selected."""
    wanted = set(selected_ids)
    if not wanted:
        return list(results)
    return [r for r in results if r.id in wanted]
