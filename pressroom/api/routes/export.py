from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from pressroom.api.deps import get_current_user
from pressroom.errors import ValidationError
from pressroom.models.schemas import ExportRequest
from pressroom.services import logger as log_service
from pressroom.services import usage as usage_service
from pressroom.services.export import export_results
from pressroom.services.filters import filter_results, select_for_export

router = APIRouter(prefix="/api/export", tags=["export"])


@router.post("")
async def export(request: ExportRequest, user_id: str = Depends(get_current_user)):
    """Download the selected (or all) results after applying the view filters."""
    selected = select_for_export(request.results, request.selected_ids)
    visible = filter_results(
        selected,
        sentiment_filter=request.sentiment_filter,
        content_type_filter=request.content_type_filter,
    )
    if not visible:
        raise ValidationError("No results to export")

    limits = await usage_service.check_exports(user_id)
    artifact = export_results(visible, request.format)
    await usage_service.record_export(user_id, limits)
    log_service.log_event(
        event_type="export_created",
        message="Results exported",
        user_id=user_id,
        format=request.format.value,
        result_count=len(visible),
    )
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
