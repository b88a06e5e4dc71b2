from __future__ import annotations

from fastapi import APIRouter, Depends

from pressroom.api.deps import get_current_user
from pressroom.models.schemas import HistoryResponse, SuccessResponse
from pressroom.services import history as history_service

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
async def list_history(user_id: str = Depends(get_current_user)):
    """Most recent searches first."""
    return HistoryResponse(history=await history_service.list_history(user_id))


@router.delete("/{search_id}", response_model=SuccessResponse)
async def delete_history(search_id: str, user_id: str = Depends(get_current_user)):
    await history_service.delete_entry(search_id, user_id)
    return SuccessResponse()
