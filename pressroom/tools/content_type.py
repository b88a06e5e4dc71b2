from __future__ import annotations

from pressroom.models.schemas import ContentType

INTERVIEW_MARKERS = ("interview", "talks to", "in conversation")
NEWS_MARKERS = ("announces", "releases", "breaking")
FEATURE_MARKERS = ("feature", "deep dive")


def classify_content_type(title: str, snippet: str = "") -> ContentType:
    """Classify a result by keyword, first match wins.

    ``review`` is matched against title and snippet; the other markers only
    against the title, since snippets routinely mention interviews or
    releases in passing.
    """
    lowered_title = (title or "").lower()
    lowered_snippet = (snippet or "").lower()

    if "review" in lowered_title or "review" in lowered_snippet:
        return ContentType.REVIEW
    if any(marker in lowered_title for marker in INTERVIEW_MARKERS):
        return ContentType.INTERVIEW
    if any(marker in lowered_title for marker in NEWS_MARKERS):
        return ContentType.NEWS
    if any(marker in lowered_title for marker in FEATURE_MARKERS):
        return ContentType.FEATURE
    return ContentType.ARTICLE
