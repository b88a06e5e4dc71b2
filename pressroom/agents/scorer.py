from __future__ import annotations

import random
from typing import Protocol

from pressroom.config import Settings
from pressroom.models.schemas import AnalysisResult, SearchResult, Sentiment

THEME_VOCABULARY = (
    "sonic evolution",
    "production quality",
    "lyrical depth",
    "genre-bending",
    "vocal performance",
    "instrumentation",
    "commercial appeal",
    "artistic growth",
    "cultural impact",
    "live performance",
    "collaboration",
    "innovation",
)

SENTIMENT_SUMMARIES: dict[Sentiment, str] = {
    Sentiment.POSITIVE: "Highly favorable coverage emphasizing artistic merit and innovation. Strong recommendation from the publication.",
    Sentiment.NEGATIVE: "Critical assessment pointing out weaknesses in execution and artistic direction. Mixed reception noted.",
    Sentiment.NEUTRAL: "Balanced coverage presenting both strengths and areas for improvement. Objective analysis provided.",
    Sentiment.MIXED: "Divided opinions with notable praise for certain aspects while critiquing others. Complex reception.",
}


class Scorer(Protocol):
    """Produces an analysis record for one result. May raise."""

    async def score(self, result: SearchResult) -> AnalysisResult:
        ...


class RandomScorer:
    """Stand-in scorer used when no analysis model is configured."""

    name = "random"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def score(self, result: SearchResult) -> AnalysisResult:
        sentiment = self._rng.choice(list(Sentiment))
        draws = self._rng.randint(2, 4)
        themes = [self._rng.choice(THEME_VOCABULARY) for _ in range(draws)]
        return AnalysisResult(
            sentiment=sentiment,
            relevance_score=self._rng.randint(70, 99),
            authority=self._rng.randint(60, 99),
            themes=themes,
            summary=SENTIMENT_SUMMARIES[sentiment],
        )


def build_scorer(settings: Settings) -> Scorer:
    """LLM-backed scorer when OpenRouter is configured, else the random one."""
    if settings.openrouter_api_key.strip():
        from pressroom.agents.analyzer_agent import AnalyzerAgent

        return AnalyzerAgent(model=settings.analysis_model)
    return RandomScorer()
