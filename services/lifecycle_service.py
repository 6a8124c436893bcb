"""
Lifecycle Service - admin bulk actions on trial and alumni state
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import (
    ALUMNI_EXTENSION_DAYS,
    MAX_TRIAL_DAYS,
    MIN_TRIAL_DAYS,
    PLAN_TRIAL,
    TRIAL_EXTENSION_DAYS,
)
from crud.user import UserRepository
from database_models import Profile
from services.errors import (
    IneligibleUserError,
    InvalidRecordError,
    LifecycleError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class BulkAction(str, Enum):
    EXTEND_TRIAL = "extendTrial"
    SET_TRIAL_DAYS = "setTrialDays"
    APPROVE_ALUMNI = "approveAlumni"


TRIAL_ONLY_ACTIONS = {BulkAction.EXTEND_TRIAL, BulkAction.SET_TRIAL_DAYS}


@dataclass
class UserUpdateResult:
    user_id: str
    ok: bool
    changes: dict = field(default_factory=dict)
    error: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        if self.ok:
            return {"userId": self.user_id, "changes": self.changes}
        return {"userId": self.user_id, "error": self.error, "message": self.message}


@dataclass
class BulkActionResult:
    """Per-user manifest of a bulk action."""
    action: str
    succeeded: List[UserUpdateResult] = field(default_factory=list)
    failed: List[UserUpdateResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def summary(self) -> str:
        return f"{self.success_count} succeeded, {self.failure_count} failed"

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "succeeded": [r.to_dict() for r in self.succeeded],
            "failed": [r.to_dict() for r in self.failed],
        }


def clamp_trial_days(value: Any) -> int:
    """
    Coerce a requested day count to an int in [MIN_TRIAL_DAYS, MAX_TRIAL_DAYS].

    Raises:
        ValidationError: value is missing, boolean, non-numeric or not integral
    """
    if value is None:
        raise ValidationError("setTrialDays requires a day count")
    if isinstance(value, bool):
        raise ValidationError("Day count must be a number")

    if isinstance(value, int):
        days = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"Day count must be a whole number, got {value!r}")
        days = int(value)
    elif isinstance(value, str):
        try:
            days = int(value.strip())
        except ValueError:
            raise ValidationError(f"Day count must be a number, got {value!r}")
    else:
        raise ValidationError(f"Day count must be a number, got {type(value).__name__}")

    return max(MIN_TRIAL_DAYS, min(MAX_TRIAL_DAYS, days))


def validate_request(action: Any, value: Any = None) -> Tuple[BulkAction, Optional[int]]:
    """Resolve the action name and day count; nothing here touches storage."""
    try:
        resolved = BulkAction(action)
    except ValueError:
        raise ValidationError(f"Unsupported action: {action!r}")

    if resolved == BulkAction.SET_TRIAL_DAYS:
        return resolved, clamp_trial_days(value)
    return resolved, None


def check_eligibility(user: Profile, action: BulkAction) -> None:
    if user.is_super_user:
        raise IneligibleUserError(f"User {user.id} is a super user and cannot be bulk-updated")
    if action in TRIAL_ONLY_ACTIONS and user.plan_type != PLAN_TRIAL:
        raise IneligibleUserError(f"{action.value} only applies to trial users (user {user.id} is {user.plan_type})")


def _extension_base(user: Profile, now: datetime) -> datetime:
    # No stored end date: extend from now
    return user.trial_ends_at or now


def extend_trial(user: Profile, now: datetime) -> dict:
    return {"trial_ends_at": _extension_base(user, now) + timedelta(days=TRIAL_EXTENSION_DAYS)}


def set_trial_days(days: int, now: datetime) -> dict:
    return {"trial_ends_at": now + timedelta(days=days)}


def approve_alumni(user: Profile, now: datetime) -> dict:
    """
    Mark the user as approved alumni and add 90 days to the trial.
    Every call restamps alumni_approved_at and compounds the extension.
    """
    return {
        "is_alumni": True,
        "alumni_approved_at": now,
        "trial_ends_at": _extension_base(user, now) + timedelta(days=ALUMNI_EXTENSION_DAYS),
    }


def compute_updates(user: Profile, action: BulkAction, days: Optional[int], now: datetime) -> dict:
    """
    Raises:
        InvalidRecordError: the stored dates cannot be extended (e.g. past datetime.max)
    """
    try:
        if action == BulkAction.EXTEND_TRIAL:
            return extend_trial(user, now)
        if action == BulkAction.SET_TRIAL_DAYS:
            return set_trial_days(days, now)
        return approve_alumni(user, now)
    except OverflowError as e:
        raise InvalidRecordError(
            f"Cannot apply {action.value} to user {user.id}: trial end {user.trial_ends_at} is out of range"
        ) from e


def _unique(user_ids: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for user_id in user_ids:
        if user_id not in seen:
            seen.add(user_id)
            ordered.append(user_id)
    return ordered


def _serialize(updates: dict) -> dict:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in updates.items()
    }


class LifecycleService:
    """
    Applies admin bulk actions to user records.

    Each user is read, updated and committed on its own; a failure on one user
    is recorded in the result and does not stop the others.
    """

    def __init__(self, db: AsyncSession, user_repo: UserRepository, clock: Clock = utc_now):
        """
        Args:
            db: AsyncSession used to commit or roll back each user's update
            user_repo: UserRepository for reads and partial updates
            clock: Callable returning "now"; read once per request
        """
        self.db = db
        self.user_repo = user_repo
        self.clock = clock

    async def apply_bulk_action(
        self,
        user_ids: Iterable[str],
        action: Any,
        value: Any = None,
    ) -> BulkActionResult:
        """
        Apply one action to every listed user.

        Args:
            user_ids: Target profile IDs (duplicates are applied once)
            action: extendTrial | setTrialDays | approveAlumni
            value: Day count for setTrialDays, ignored otherwise

        Returns:
            BulkActionResult listing which users succeeded and which failed

        Raises:
            ValidationError: unsupported action or unusable day count; nothing is written
        """
        resolved, days = validate_request(action, value)
        targets = _unique(user_ids)
        result = BulkActionResult(action=resolved.value)

        if not targets:
            logger.info(f"Bulk action {resolved.value}: no users selected")
            return result

        now = self.clock()
        for user_id in targets:
            try:
                changes = await self._apply_one(user_id, resolved, days, now)
            except LifecycleError as e:
                await self.db.rollback()
                logger.warning(f"Bulk action {resolved.value} failed for user {user_id}: [{e.code}] {e.message}")
                result.failed.append(
                    UserUpdateResult(user_id=user_id, ok=False, error=e.code, message=e.message)
                )
            else:
                result.succeeded.append(UserUpdateResult(user_id=user_id, ok=True, changes=changes))

        logger.info(f"Bulk action {resolved.value} on {len(targets)} users: {result.summary}")
        return result

    async def _apply_one(
        self,
        user_id: str,
        action: BulkAction,
        days: Optional[int],
        now: datetime,
    ) -> dict:
        try:
            user = await self.user_repo.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")

            check_eligibility(user, action)
            updates = compute_updates(user, action, days, now)
            await self.user_repo.update_user(user, updates)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update user {user_id}: {e}") from e

        return _serialize(updates)
