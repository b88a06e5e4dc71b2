from __future__ import annotations

from typing import Any

from pressroom.models.events import EventType, SSEEvent
from pressroom.models.schemas import SearchResult
from pressroom.services.enricher import EnrichmentEvent, EnrichmentPhase, EnrichmentSummary


def _result_payload(result: SearchResult) -> dict[str, Any]:
    return result.model_dump(mode="json", by_alias=True)


def analysis_started(event: EnrichmentEvent) -> SSEEvent:
    return SSEEvent(
        event=EventType.ANALYSIS_STARTED,
        data={"index": event.index, "resultId": event.result.id},
    )


def analysis_result(event: EnrichmentEvent) -> SSEEvent:
    return SSEEvent(
        event=EventType.ANALYSIS_RESULT,
        data={"index": event.index, "result": _result_payload(event.result)},
    )


def analysis_failed(event: EnrichmentEvent) -> SSEEvent:
    return SSEEvent(
        event=EventType.ANALYSIS_FAILED,
        data={"index": event.index, "resultId": event.result.id, "error": event.error},
    )


def analysis_progress(progress: float) -> SSEEvent:
    return SSEEvent(event=EventType.ANALYSIS_PROGRESS, data={"progress": round(progress, 4)})


def analysis_complete(summary: EnrichmentSummary) -> SSEEvent:
    return SSEEvent(
        event=EventType.ANALYSIS_COMPLETE,
        data={
            "total": summary.total,
            "completed": summary.completed,
            "failed": summary.failed,
            "cancelled": summary.cancelled,
            "progress": round(summary.progress, 4),
        },
    )


def from_enrichment(event: EnrichmentEvent) -> list[SSEEvent]:
    """Translate one enrichment event into the SSE events sent to clients."""
    if event.phase == EnrichmentPhase.STARTED:
        return [analysis_started(event)]
    if event.phase == EnrichmentPhase.ANALYZED:
        return [analysis_result(event), analysis_progress(event.progress)]
    return [analysis_failed(event), analysis_progress(event.progress)]


def error(message: str) -> SSEEvent:
    return SSEEvent(event=EventType.ERROR, data={"message": message})
