from fastapi import APIRouter, Body, Depends
from ..dependencies import get_downtime_service, get_sweeper
from ..schemas.downtime import DowntimeCreate
from ..schemas.envelope import success_response, pagination_meta
from ..services.downtime_service import DowntimeService
from ..services.sweep_service import ReconciliationSweeper
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/")
def create_downtime(payload: DowntimeCreate, service: DowntimeService = Depends(get_downtime_service)):
    """Schedule a maintenance window for a registered system."""
    window_id = service.create(
        payload.system_id,
        payload.from_time,
        payload.to_time,
        payload.reason,
        actor=payload.created_by,
    )
    return success_response({"id": window_id}, "Downtime scheduled successfully")


@router.get("/")
def list_downtimes(page: int = 1, limit: int = 50, service: DowntimeService = Depends(get_downtime_service)):
    result = service.list(page, limit)
    return success_response(
        [row.model_dump(mode="json") for row in result.rows],
        "Downtimes retrieved successfully",
        meta=pagination_meta(result.total_count, page, limit),
    )


# Registered before /{window_id} so "auto-update" is never parsed as an id
@router.post("/auto-update")
def auto_update_downtimes(sweeper: ReconciliationSweeper = Depends(get_sweeper)):
    """Mark every downtime whose end time has passed as finished."""
    updated_count = sweeper.sweep()
    return success_response({"updatedCount": updated_count}, "Auto-updated completed downtimes")


@router.get("/{window_id}")
def get_downtime(window_id: int, service: DowntimeService = Depends(get_downtime_service)):
    downtime = service.get(window_id)
    return success_response(downtime.model_dump(mode="json"), "Downtime retrieved successfully")


@router.patch("/{window_id}")
def update_downtime(
    window_id: int,
    payload: dict = Body(...),
    service: DowntimeService = Depends(get_downtime_service),
):
    """
    Update the finished/archived flags of a downtime.
    Any other key in the body is ignored; values must be 0 or 1.
    """
    actor = payload.get("updated_by") or payload.get("userName")
    service.update(window_id, payload, actor=actor)
    return success_response(None, "Downtime updated successfully")
