from __future__ import annotations

import time

from fastapi import APIRouter, Depends

from pressroom.agents.scorer import Scorer
from pressroom.api.deps import get_current_user, get_scorer
from pressroom.models.schemas import AnalyzeRequest, AnalyzeResponse
from pressroom.services import logger as log_service

router = APIRouter(prefix="/api/analyze", tags=["analyze"])


@router.post("", response_model=AnalyzeResponse)
async def analyze(
    request: AnalyzeRequest,
    user_id: str = Depends(get_current_user),
    scorer: Scorer = Depends(get_scorer),
):
    """Analyse a single result on demand."""
    t0 = time.monotonic()
    analysis = await scorer.score(request.result)
    log_service.log_event(
        event_type="analysis_completed",
        message="Single result analysed",
        user_id=user_id,
        result_id=request.result.id,
        duration_ms=int((time.monotonic() - t0) * 1000),
    )
    return AnalyzeResponse(analysis=analysis)
