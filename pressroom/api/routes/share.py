from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pressroom.api.deps import get_current_user
from pressroom.models.schemas import SearchHistoryEntry, ShareRequest, ShareResponse, SuccessResponse
from pressroom.services import history as history_service

router = APIRouter(prefix="/api", tags=["share"])


@router.post("/share", response_model=ShareResponse)
async def share_search(request: ShareRequest, user_id: str = Depends(get_current_user)):
    """Publish a stored search under a fresh random token."""
    return await history_service.share(request.search_id, user_id)


@router.delete("/share", response_model=SuccessResponse)
async def unshare_search(
    search_id: str = Query(alias="id"),
    user_id: str = Depends(get_current_user),
):
    await history_service.unshare(search_id, user_id)
    return SuccessResponse()


@router.get(
    "/shared/{token}",
    response_model=SearchHistoryEntry,
    response_model_exclude={"user_id"},
)
async def get_shared_search(token: str):
    """Public read of a shared search. No authentication required."""
    return await history_service.get_shared(token)
