"""
Background scheduler status endpoint.
"""

from fastapi import APIRouter, Depends

from ...shared.api import DataResponse, create_data_response
from ...shared.auth import get_current_user
from ...shared.utils import CurrentUser
from ..dependencies import get_scheduler_service
from ..services.scheduler_service import SchedulerService

router = APIRouter()


@router.get("/scheduler/status")
async def get_scheduler_status(
    user: CurrentUser = Depends(get_current_user),
    scheduler_service: SchedulerService = Depends(get_scheduler_service),
) -> DataResponse:
    return create_data_response(scheduler_service.get_status())
