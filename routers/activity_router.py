"""
Activity Router - records user activity events
"""
import logging

from fastapi import APIRouter, Depends

from backend.utils.responses import success_response, error_response
from models.admin_models import ActivityRequest
from routers.admin_users_router import get_user_admin_service
from services.errors import LifecycleError
from services.user_admin_service import UserAdminService

logger = logging.getLogger(__name__)

activity_router = APIRouter(prefix="/api/activities", tags=["activities"])


@activity_router.post("")
async def record_activity(
    request: ActivityRequest,
    service: UserAdminService = Depends(get_user_admin_service),
):
    try:
        data = await service.record_activity(
            request.user_id,
            request.activity_type,
            target_id=request.target_id,
            target_title=request.target_title,
        )
    except LifecycleError as e:
        logger.warning(f"Activity not recorded for {request.user_id}: [{e.code}] {e.message}")
        return error_response(e.code, status=e.status, message=e.message)

    message = "Activity skipped for super user" if data["skipped"] else "Activity recorded"
    return success_response(data=data, message=message)
