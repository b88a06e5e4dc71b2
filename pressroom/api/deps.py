from __future__ import annotations

from fastapi import Depends, Header, Query

from pressroom.agents.scorer import Scorer, build_scorer
from pressroom.config import settings
from pressroom.errors import UnauthorizedError
from pressroom.services import logger as log_service
from pressroom.services import supabase as db
from pressroom.services.enricher import Enricher
from pressroom.tools.search_provider import SearchOrchestrator

BEARER_PREFIX = "bearer "


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):].strip() or None


async def get_current_user(
    authorization: str | None = Header(default=None),
    access_token: str | None = Query(default=None),
) -> str:
    """Resolve the caller's user id from a Supabase JWT.

    The token comes from ``Authorization: Bearer`` or, for EventSource
    clients that cannot set headers, the ``access_token`` query parameter.
    """
    token = _bearer_token(authorization) or access_token
    if not token:
        raise UnauthorizedError()
    try:
        user_id = await db.get_user_id(token)
    except Exception as e:
        log_service.log_event(event_type="auth_failed", message="Token rejected", error=str(e))
        raise UnauthorizedError() from e
    if not user_id:
        raise UnauthorizedError()
    return user_id


_orchestrator: SearchOrchestrator | None = None
_scorer: Scorer | None = None


def get_orchestrator() -> SearchOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = SearchOrchestrator.from_settings(settings)
    return _orchestrator


def get_scorer() -> Scorer:
    global _scorer
    if _scorer is None:
        _scorer = build_scorer(settings)
    return _scorer


def get_enricher(scorer: Scorer = Depends(get_scorer)) -> Enricher:
    return Enricher(scorer, max_parallel=settings.analysis_max_parallel)
