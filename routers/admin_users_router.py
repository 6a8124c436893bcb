"""
Admin Users Router - user list, user detail and bulk lifecycle actions
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.utils.responses import success_response, error_response
from crud.activity import ActivityRepository
from crud.alumni import AlumniRepository
from crud.user import UserRepository
from database import get_db
from models.admin_models import BulkActionRequest
from services.errors import LifecycleError
from services.lifecycle_service import LifecycleService
from services.user_admin_service import UserAdminService
from utils.clock import Clock, get_clock

logger = logging.getLogger(__name__)

# Create router
admin_users_router = APIRouter(prefix="/api/admin/users", tags=["admin"])


def get_user_admin_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> UserAdminService:
    return UserAdminService(db, UserRepository(db), ActivityRepository(db), AlumniRepository(db), clock=clock)


def get_lifecycle_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> LifecycleService:
    return LifecycleService(db, UserRepository(db), clock=clock)


@admin_users_router.get("")
async def list_users(
    filter: Optional[str] = Query(default="all"),
    search: Optional[str] = Query(default=None),
    service: UserAdminService = Depends(get_user_admin_service),
):
    """List users with engagement score, churn risk and KPI counters"""
    try:
        data = await service.list_users(filter, search)
    except LifecycleError as e:
        logger.error(f"User list failed: [{e.code}] {e.message}")
        return error_response(e.code, status=e.status, message=e.message)

    return success_response(data=data, message=f"{len(data['users'])} users")


@admin_users_router.patch("")
async def bulk_update_users(
    request: BulkActionRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
):
    """
    Apply extendTrial / setTrialDays / approveAlumni to the selected users.

    Validation errors reject the whole request before anything is written.
    Otherwise the response is 200 with a per-user manifest, even when some
    users failed.
    """
    try:
        result = await service.apply_bulk_action(request.user_ids, request.action, request.value)
    except LifecycleError as e:
        logger.warning(f"Bulk action rejected: [{e.code}] {e.message}")
        return error_response(e.code, status=e.status, message=e.message)

    return success_response(data=result.to_dict(), message=result.summary)


@admin_users_router.get("/{user_id}")
async def get_user_detail(
    user_id: str,
    service: UserAdminService = Depends(get_user_admin_service),
):
    """Profile, cumulative stats, 7/30-day activity, engagement and recent activity for one user"""
    try:
        data = await service.get_user_detail(user_id)
    except LifecycleError as e:
        if e.status >= 500:
            logger.error(f"User detail failed for {user_id}: {e.message}")
        return error_response(e.code, status=e.status, message=e.message)

    return success_response(data=data, message="User detail retrieved successfully")
