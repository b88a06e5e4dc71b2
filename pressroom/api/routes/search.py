from __future__ import annotations

import asyncio
import json as _json

from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse

from pressroom.api.deps import get_current_user, get_enricher, get_orchestrator
from pressroom.errors import PressroomError
from pressroom.models.events import SSEEvent
from pressroom.models.schemas import SearchConfig, SearchResponse
from pressroom.services import history as history_service
from pressroom.services import logger as log_service
from pressroom.services import streaming
from pressroom.services import usage as usage_service
from pressroom.services.enricher import Enricher
from pressroom.tools.search_provider import SearchOrchestrator

router = APIRouter(prefix="/api/search", tags=["search"])


def _sse(event: SSEEvent) -> dict[str, str]:
    return {"event": event.event.value, "data": _json.dumps(event.data)}


@router.post("", response_model=SearchResponse)
async def search(
    config: SearchConfig,
    user_id: str = Depends(get_current_user),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """Run a search. Results come back unanalysed; stream analysis separately."""
    limits = await usage_service.check_searches(user_id)

    try:
        outcome = await orchestrator.search(config)
    except PressroomError:
        raise
    except Exception as e:
        log_service.log_event(
            event_type="search_error",
            message="Search failed",
            error=str(e),
            user_id=user_id,
        )
        raise PressroomError("Search failed") from e

    await usage_service.record_search(user_id, limits)

    search_id: str | None = None
    try:
        search_id = await history_service.save_search(user_id, config, outcome.results)
    except Exception as e:
        log_service.log_db_operation(
            "insert", "search_history", "failed", details=user_id, error=str(e)
        )

    log_service.log_event(
        event_type="search_completed",
        message="Search completed",
        user_id=user_id,
        provider=outcome.provider,
        result_count=len(outcome.results),
    )
    return SearchResponse(results=outcome.results, search_id=search_id, provider=outcome.provider)


@router.get("/{search_id}/stream")
async def stream_analysis(
    search_id: str,
    request: Request,
    user_id: str = Depends(get_current_user),
    enricher: Enricher = Depends(get_enricher),
):
    """SSE endpoint that streams analysis of a stored search."""
    entry = await history_service.get_entry(search_id, user_id)
    results = list(entry.results)
    cancel = asyncio.Event()

    async def event_generator():
        batch = enricher.enrich(results, cancel=cancel)
        try:
            async for event in batch:
                if await request.is_disconnected():
                    cancel.set()
                    continue
                for sse_event in streaming.from_enrichment(event):
                    yield _sse(sse_event)

            if batch.summary.cancelled:
                log_service.log_event(
                    event_type="analysis_cancelled",
                    message="Client disconnected during analysis",
                    search_id=search_id,
                )
                return

            yield _sse(streaming.analysis_complete(batch.summary))
            if batch.pending:
                await history_service.save_results(search_id, user_id, batch.results)
        except Exception as e:
            log_service.log_event(
                event_type="stream_error",
                message="Unhandled error in analysis stream",
                error=str(e),
                search_id=search_id,
            )
            yield _sse(streaming.error("Analysis stream failed unexpectedly."))

    return EventSourceResponse(event_generator())
