"""
Alumni Router - applications from users, review and batches for admins
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.utils.responses import success_response, error_response
from crud.alumni import AlumniRepository
from crud.user import UserRepository
from database import get_db
from models.admin_models import AlumniApplyRequest, AlumniBatchRequest, AlumniReviewRequest
from services.alumni_service import AlumniService
from services.errors import LifecycleError
from utils.clock import Clock, get_clock

logger = logging.getLogger(__name__)

alumni_router = APIRouter(prefix="/api/alumni", tags=["alumni"])
admin_alumni_router = APIRouter(prefix="/api/admin/alumni", tags=["admin"])


def get_alumni_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AlumniService:
    return AlumniService(db, UserRepository(db), AlumniRepository(db), clock=clock)


def _failure(e: LifecycleError, context: str):
    if e.status >= 500:
        logger.error(f"{context}: [{e.code}] {e.message}")
    else:
        logger.warning(f"{context}: [{e.code}] {e.message}")
    return error_response(e.code, status=e.status, message=e.message)


@alumni_router.post("/apply")
async def apply_for_alumni(
    request: AlumniApplyRequest,
    service: AlumniService = Depends(get_alumni_service),
):
    try:
        data = await service.apply(request.user_id, request.batch_number)
    except LifecycleError as e:
        return _failure(e, f"Alumni application rejected for {request.user_id}")

    return success_response(data=data, message="Application submitted successfully")


@alumni_router.get("/status")
async def get_alumni_status(
    user_id: str = Query(alias="userId"),
    service: AlumniService = Depends(get_alumni_service),
):
    try:
        data = await service.get_status(user_id)
    except LifecycleError as e:
        return _failure(e, f"Alumni status failed for {user_id}")

    return success_response(data=data)


@alumni_router.get("/batches")
async def list_alumni_batches(service: AlumniService = Depends(get_alumni_service)):
    try:
        data = await service.list_batches()
    except LifecycleError as e:
        return _failure(e, "Batch list failed")

    return success_response(data=data)


@admin_alumni_router.get("")
async def list_alumni_applications(
    status: Optional[str] = Query(default="all"),
    page: int = Query(default=1),
    limit: int = Query(default=20),
    service: AlumniService = Depends(get_alumni_service),
):
    """Paginated alumni applications with applicant and batch name"""
    try:
        data = await service.list_applications(status, page=page, limit=limit)
    except LifecycleError as e:
        return _failure(e, "Alumni application list failed")

    return success_response(data=data, message=f"{data['total']} applications")


@admin_alumni_router.put("")
async def review_alumni_application(
    request: AlumniReviewRequest,
    service: AlumniService = Depends(get_alumni_service),
):
    """Approve or reject one pending application"""
    try:
        data = await service.review(
            request.id,
            request.action,
            rejection_reason=request.rejection_reason,
            reviewer_id=request.reviewer_id,
        )
    except LifecycleError as e:
        return _failure(e, f"Review of alumni application {request.id} failed")

    message = "Approved successfully" if data["application"]["status"] == "approved" else "Rejected successfully"
    return success_response(data=data, message=message)


@admin_alumni_router.post("/batches")
async def create_alumni_batch(
    request: AlumniBatchRequest,
    service: AlumniService = Depends(get_alumni_service),
):
    try:
        data = await service.create_batch(request.batch_number, request.name, request.graduation_date)
    except LifecycleError as e:
        return _failure(e, "Batch creation failed")

    return success_response(data=data, message="Batch created")
