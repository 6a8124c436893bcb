"""
Alumni Service - alumni applications, their review and the batch catalogue
"""
import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import ALUMNI_APPROVED, ALUMNI_PENDING, ALUMNI_REJECTED
from crud.alumni import AlumniRepository
from crud.user import UserRepository
from database_models import AlumniApplication
from services.errors import ConflictError, LifecycleError, NotFoundError, StorageError, ValidationError
from utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


APPLICATION_STATUSES = {ALUMNI_PENDING, ALUMNI_APPROVED, ALUMNI_REJECTED}


def _require_batch_number(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("A batch number is required")
    return value


class AlumniService:
    """
    Alumni application flow.

    A user applies with a batch number and the application waits as pending.
    An admin approves it, which marks the profile as alumni, or rejects it,
    after which the user may apply again.
    """

    def __init__(
        self,
        db: AsyncSession,
        user_repo: UserRepository,
        alumni_repo: AlumniRepository,
        clock: Clock = utc_now,
    ):
        self.db = db
        self.user_repo = user_repo
        self.alumni_repo = alumni_repo
        self.clock = clock

    async def apply(self, user_id: str, batch_number: Any) -> Dict[str, Any]:
        """
        Submit (or resubmit after a rejection) an alumni application.

        Raises:
            ValidationError: missing batch number or no active batch with that number
            NotFoundError: user_id does not resolve
            ConflictError: an application is already pending or approved
        """
        batch_number = _require_batch_number(batch_number)
        now = self.clock()
        try:
            user = await self.user_repo.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")

            batch = await self.alumni_repo.get_batch(batch_number)
            if batch is None:
                raise ValidationError(f"Invalid batch number: {batch_number}")

            application = await self.alumni_repo.get_application_for_user(user_id)
            if application is not None and application.status == ALUMNI_PENDING:
                raise ConflictError("An alumni application is already pending")
            if application is not None and application.status == ALUMNI_APPROVED:
                raise ConflictError("User is already an approved alumnus")

            if application is None:
                application = AlumniApplication(user_id=user_id)
            application.batch_number = batch_number
            application.status = ALUMNI_PENDING
            application.applied_at = now
            application.rejection_reason = None
            application = await self.alumni_repo.save_application(application)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to save alumni application for user {user_id}: {e}") from e

        logger.info(f"Alumni application from user {user_id} for batch {batch_number} ({batch.name})")
        return {"application": application.to_dict(), "status": ALUMNI_PENDING}

    async def get_status(self, user_id: str) -> Dict[str, Any]:
        """The user's application (or None) and the alumni fields of their profile."""
        try:
            user = await self.user_repo.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            application = await self.alumni_repo.get_application_for_user(user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load alumni status for user {user_id}: {e}") from e

        return {
            "application": application.to_dict() if application else None,
            "profile": {
                "is_alumni": user.is_alumni,
                "alumni_batch_number": user.alumni_batch_number,
                "alumni_approved_at": user.alumni_approved_at.isoformat() if user.alumni_approved_at else None,
                "created_at": user.created_at.isoformat() if user.created_at else None,
            },
        }

    async def list_applications(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        """
        Paginated application list for the admin screen.

        Args:
            status: pending | approved | rejected | all
            page: 1-based page number
            limit: Page size, at most MAX_PAGE_SIZE
        """
        if status in (None, "", "all"):
            status = None
        elif status not in APPLICATION_STATUSES:
            raise ValidationError(f"Unsupported status: {status!r}")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        limit = min(limit, MAX_PAGE_SIZE)

        try:
            rows, total = await self.alumni_repo.list_applications(status, offset=(page - 1) * limit, limit=limit)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list alumni applications: {e}") from e

        applications = []
        for application, profile, batch in rows:
            item = application.to_dict()
            item["profile"] = {"email": profile.email, "display_name": profile.display_name}
            item["batch_name"] = batch.name if batch else None
            applications.append(item)

        return {
            "applications": applications,
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        }

    async def review(
        self,
        application_id: int,
        action: Any,
        rejection_reason: Optional[str] = None,
        reviewer_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Approve or reject a pending application.

        Approval stamps the application and the applicant's profile
        (is_alumni, alumni_batch_number, alumni_approved_at) in one commit.
        The trial is not extended here; that is the approveAlumni bulk action.

        Raises:
            ValidationError: action is not approve/reject
            NotFoundError: application_id does not resolve
            ConflictError: the application is no longer pending
        """
        try:
            resolved = ReviewAction(action)
        except ValueError:
            raise ValidationError(f"Unsupported review action: {action!r}")

        now = self.clock()
        try:
            application = await self.alumni_repo.get_application(application_id)
            if application is None:
                raise NotFoundError(f"Alumni application {application_id} not found")
            if application.status != ALUMNI_PENDING:
                raise ConflictError(f"Alumni application {application_id} is already {application.status}")

            if resolved == ReviewAction.APPROVE:
                application.status = ALUMNI_APPROVED
                application.approved_at = now
                application.approved_by = reviewer_id
                user = await self.user_repo.get_user_by_id(application.user_id)
                if user is None:
                    raise NotFoundError(f"User {application.user_id} not found")
                await self.user_repo.update_user(user, {
                    "is_alumni": True,
                    "alumni_batch_number": application.batch_number,
                    "alumni_approved_at": now,
                })
            else:
                application.status = ALUMNI_REJECTED
                application.rejection_reason = rejection_reason or None

            application = await self.alumni_repo.save_application(application)
            await self.db.commit()
        except LifecycleError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to review alumni application {application_id}: {e}") from e

        logger.info(f"Alumni application {application_id} {application.status} by {reviewer_id or 'admin'}")
        return {"application": application.to_dict()}

    async def list_batches(self) -> Dict[str, Any]:
        try:
            batches = await self.alumni_repo.list_batches()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list alumni batches: {e}") from e
        return {"batches": [b.to_dict() for b in batches]}

    async def create_batch(
        self,
        batch_number: Any,
        name: str,
        graduation_date: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Register a new active batch users can apply for."""
        batch_number = _require_batch_number(batch_number)
        if not name or not name.strip():
            raise ValidationError("A batch name is required")
        if graduation_date is not None and graduation_date.tzinfo is not None:
            graduation_date = graduation_date.astimezone(timezone.utc).replace(tzinfo=None)

        try:
            if await self.alumni_repo.get_batch(batch_number, active_only=False) is not None:
                raise ConflictError(f"Batch {batch_number} already exists")
            batch = await self.alumni_repo.create_batch({
                "batch_number": batch_number,
                "name": name.strip(),
                "graduation_date": graduation_date,
                "is_active": True,
            })
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to create batch {batch_number}: {e}") from e

        return {"batch": batch.to_dict()}
