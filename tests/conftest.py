from __future__ import annotations

import pytest

from pressroom.models.schemas import AnalysisResult, ContentType, SearchResult, Sentiment


@pytest.fixture
def make_result():
    """Factory for unanalysed search results with sensible defaults."""

    def _make(index: int = 0, **overrides) -> SearchResult:
        data = {
            "id": f"result-{index}",
            "title": f"Result {index}",
            "url": f"https://example.com/article-{index}",
            "source": "Pitchfork",
            "publish_date": "2024-01-15T00:00:00+00:00",
            "snippet": "Snippet",
            "content_type": ContentType.ARTICLE,
        }
        data.update(overrides)
        return SearchResult(**data)

    return _make


@pytest.fixture
def make_analysis():
    def _make(sentiment: Sentiment = Sentiment.POSITIVE, **overrides) -> AnalysisResult:
        data = {
            "sentiment": sentiment,
            "relevance_score": 90,
            "authority": 80,
            "themes": ["innovation", "lyrical depth"],
            "summary": "Summary",
        }
        data.update(overrides)
        return AnalysisResult(**data)

    return _make
