from __future__ import annotations

import json
import time
from typing import Any

from pressroom import llm_client
from pressroom.agents.scorer import SENTIMENT_SUMMARIES
from pressroom.errors import AnalysisError
from pressroom.models.schemas import AnalysisResult, SearchResult, Sentiment
from pressroom.services import logger as log_service

SYSTEM_PROMPT = (
    "You are a music-press analyst. You will be given one article found while "
    "researching an artist or topic. Judge how the article treats its subject and "
    "respond ONLY with a JSON object (no markdown fences, no commentary) with:\n"
    '- "sentiment": one of positive, neutral, negative, mixed\n'
    '- "relevance_score": integer 0-100, how directly the article covers the query\n'
    '- "authority": integer 0-100, standing of the publication in music criticism\n'
    '- "themes": array of 2-4 short lowercase labels (e.g. "production quality")\n'
    '- "summary": one sentence synopsis consistent with the sentiment'
)


def _clamp_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AnalysisError(f"score is not a number: {value!r}")
    return max(0, min(100, int(round(value))))


def parse_analysis(text: str) -> AnalysisResult:
    """Parse the model's JSON reply into an AnalysisResult.

    Raises:
        AnalysisError: if the reply is not a JSON object with numeric scores.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)

    try:
        raw = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"analysis reply is not JSON: {e}") from e
    if not isinstance(raw, dict):
        raise AnalysisError("analysis reply is not a JSON object")

    try:
        sentiment = Sentiment(str(raw.get("sentiment", "neutral")).lower())
    except ValueError:
        sentiment = Sentiment.NEUTRAL

    raw_themes = raw.get("themes", [])
    themes = [str(t).strip().lower() for t in raw_themes] if isinstance(raw_themes, list) else []

    summary = str(raw.get("summary", "") or "").strip() or SENTIMENT_SUMMARIES[sentiment]

    return AnalysisResult(
        sentiment=sentiment,
        relevance_score=_clamp_score(raw.get("relevance_score")),
        authority=_clamp_score(raw.get("authority")),
        themes=themes,
        summary=summary,
    )


class AnalyzerAgent:
    """Scores one result with an LLM served through OpenRouter."""

    name = "analyzer"

    def __init__(self, model: str | None = None, client: Any | None = None) -> None:
        self.model = model or llm_client.get_model()
        self.client = client

    @staticmethod
    def build_prompt(result: SearchResult) -> str:
        parts = [
            f"Title: {result.title}",
            f"Publication: {result.source}",
            f"Published: {result.publish_date}",
            f"Content type: {result.content_type.value}",
            f"URL: {result.url}",
        ]
        if result.snippet:
            parts.append(f"Excerpt: {result.snippet}")
        return "\n".join(parts)

    async def score(self, result: SearchResult) -> AnalysisResult:
        active_client = self.client or llm_client.client()
        t0 = time.monotonic()
        try:
            response = await active_client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self.build_prompt(result)},
                ],
                max_tokens=400,
                temperature=0,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            log_service.log_llm_call(
                model=self.model,
                caller=self.name,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(e),
            )
            raise AnalysisError(f"analysis request failed: {e}") from e

        usage = getattr(response, "usage", None)
        log_service.log_llm_call(
            model=self.model,
            caller=self.name,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )

        choices = getattr(response, "choices", None) or []
        text = getattr(choices[0].message, "content", "") if choices else ""
        return parse_analysis(text or "")
