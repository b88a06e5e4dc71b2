from __future__ import annotations

from fastapi import APIRouter, Depends

from pressroom.api.deps import get_current_user
from pressroom.models.schemas import UsageResponse
from pressroom.services import usage as usage_service

router = APIRouter(prefix="/api/usage", tags=["usage"])


@router.get("", response_model=UsageResponse)
async def get_usage(user_id: str = Depends(get_current_user)):
    return UsageResponse(limits=await usage_service.get_limits(user_id))
