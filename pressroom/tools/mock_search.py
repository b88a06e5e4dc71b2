from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from pressroom.models.schemas import ALL, ContentType, SearchConfig, SearchResult
from pressroom.tools.base import new_result_id

PUBLICATIONS = (
    "Pitchfork",
    "Rolling Stone",
    "NME",
    "The Guardian",
    "Stereogum",
    "Consequence",
    "Brooklyn Vegan",
    "DIY Magazine",
)

MIN_RESULTS = 10
MAX_RESULTS = 24
MAX_DAYS_BACK = 60

TITLE_TEMPLATES: dict[ContentType, tuple[str, ...]] = {
    ContentType.REVIEW: (
        "{q} Album Review: A Bold New Direction",
        "{q} - [Album Title] Review",
        "Review: {q} Returns With Ambitious New Work",
        "{q}'s Latest: A Track-by-Track Review",
    ),
    ContentType.INTERVIEW: (
        "{q} Talks New Album and Creative Process",
        "In Conversation: {q}",
        "{q} Opens Up About Their Musical Journey",
        "Interview: {q} on Innovation and Inspiration",
    ),
    ContentType.ARTICLE: (
        "{q}: The Artist Redefining Modern Music",
        "How {q} Changed the Game",
        "{q}'s Impact on Contemporary Sound",
        "The Evolution of {q}",
    ),
    ContentType.NEWS: (
        "{q} Announces New Album Release",
        "{q} Wins Major Industry Award",
        "{q} to Headline Festival",
        "Breaking: {q} Signs Major Deal",
    ),
    ContentType.FEATURE: (
        "{q}: A Rising Star's Story",
        "The Genius of {q}",
        "{q} and the Future of Music",
        "Why {q} Matters Now More Than Ever",
    ),
}

SNIPPET_TEMPLATES = (
    "An in-depth look at {q}'s latest work reveals a fascinating blend of influences and innovation. The production showcases remarkable attention to detail...",
    "{q} continues to push boundaries with their unique approach to songwriting and performance. Critics are calling this their most mature work yet...",
    "What sets {q} apart is their unwavering commitment to authenticity. This latest release demonstrates both technical prowess and emotional depth...",
    "{q}'s evolution as an artist has been remarkable to witness. The new material represents a significant departure from earlier work while maintaining...",
    "With this release, {q} solidifies their position as one of the most important voices in contemporary music. The critical response has been overwhelmingly...",
)


def _candidate_types(config: SearchConfig) -> list[ContentType]:
    requested = [t for t in config.content_types if t != ALL]
    if not requested or ALL in config.content_types:
        return list(ContentType)
    return [ContentType(t) for t in dict.fromkeys(requested)]


class SyntheticSearchProvider:
    """Generates plausible music-press results when no real provider answers."""

    name = "synthetic"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def result_count(self, max_results: int) -> int:
        return min(max_results, self._rng.randint(MIN_RESULTS, MAX_RESULTS))

    async def search(self, config: SearchConfig) -> list[SearchResult]:
        query = config.query.strip()
        types = _candidate_types(config)
        now = datetime.now(timezone.utc)
        results: list[SearchResult] = []

        for i in range(self.result_count(config.max_results)):
            content_type = self._rng.choice(types)
            published = now - timedelta(days=self._rng.randrange(MAX_DAYS_BACK))
            results.append(
                SearchResult(
                    id=new_result_id(),
                    title=self._rng.choice(TITLE_TEMPLATES[content_type]).format(q=query),
                    url=f"https://example.com/article-{i}",
                    source=self._rng.choice(PUBLICATIONS),
                    publish_date=published.isoformat(),
                    snippet=self._rng.choice(SNIPPET_TEMPLATES).format(q=query),
                    content_type=content_type,
                )
            )
        return results
