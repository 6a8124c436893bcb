"""
User Admin Service - user listing with KPIs, single-user detail and activity tracking
"""
import logging
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import (
    ACTIVITY_WINDOW_DAYS,
    EXTENDED_WINDOW_DAYS,
    PLAN_PAID,
    PLAN_TRIAL,
    SUBSCRIPTION_MONTHLY,
    SUBSCRIPTION_YEARLY,
)
from crud.activity import ActivityRepository
from crud.alumni import AlumniRepository
from crud.user import UserRepository
from database_models import Profile
from models.activity import ActivityType
from services.engagement_service import ChurnRisk, assess_user
from services.trial_service import trial_status
from services.errors import NotFoundError, StorageError, ValidationError
from utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class UserFilter(str, Enum):
    ALL = "all"
    TRIAL = "trial"
    PAID_MONTHLY = "paidMonthly"
    PAID_YEARLY = "paidYearly"
    SUPER = "super"
    HIGH_RISK = "highRisk"
    ALUMNI_PENDING = "alumniPending"


def _matches(row: Dict[str, Any], user_filter: UserFilter) -> bool:
    is_super = row["is_super_user"]
    if user_filter == UserFilter.TRIAL:
        return row["plan_type"] == PLAN_TRIAL and not is_super
    if user_filter == UserFilter.PAID_MONTHLY:
        return row["plan_type"] == PLAN_PAID and row["subscription_type"] == SUBSCRIPTION_MONTHLY and not is_super
    if user_filter == UserFilter.PAID_YEARLY:
        return row["plan_type"] == PLAN_PAID and row["subscription_type"] == SUBSCRIPTION_YEARLY and not is_super
    if user_filter == UserFilter.SUPER:
        return is_super
    if user_filter == UserFilter.HIGH_RISK:
        return row["churnRisk"] == ChurnRisk.HIGH.value
    if user_filter == UserFilter.ALUMNI_PENDING:
        return row["alumniApplicationPending"] or (bool(row["is_alumni"]) and not row["alumni_approved_at"])
    return True


def compute_kpis(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    """KPI counters for the admin user list; always computed over the unfiltered set."""
    kpis = {"total": len(rows)}
    for name, user_filter in (
        ("trial", UserFilter.TRIAL),
        ("paidMonthly", UserFilter.PAID_MONTHLY),
        ("paidYearly", UserFilter.PAID_YEARLY),
        ("superUser", UserFilter.SUPER),
        ("highRisk", UserFilter.HIGH_RISK),
        ("alumniPending", UserFilter.ALUMNI_PENDING),
    ):
        kpis[name] = sum(1 for row in rows if _matches(row, user_filter))
    return kpis


class UserAdminService:
    """Read paths for the admin user screens, plus activity recording."""

    def __init__(
        self,
        db: AsyncSession,
        user_repo: UserRepository,
        activity_repo: ActivityRepository,
        alumni_repo: AlumniRepository,
        clock: Clock = utc_now,
    ):
        self.db = db
        self.user_repo = user_repo
        self.activity_repo = activity_repo
        self.alumni_repo = alumni_repo
        self.clock = clock

    async def list_users(self, user_filter: Any = UserFilter.ALL, search: Optional[str] = None) -> Dict[str, Any]:
        """
        List every user with engagement score, churn risk and trial days remaining.

        Args:
            user_filter: UserFilter value restricting the returned rows
            search: Case-insensitive match on email or display name

        Returns:
            {"users": [...], "kpis": {...}}; KPIs ignore the filter and search
        """
        try:
            resolved = UserFilter(user_filter or UserFilter.ALL)
        except ValueError:
            raise ValidationError(f"Unsupported filter: {user_filter!r}")

        now = self.clock()
        since = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
        needle = (search or "").strip()
        try:
            users = await self.user_repo.list_users()
            pending_ids = await self.alumni_repo.pending_user_ids()
            rows = []
            for user in users:
                counts = await self.activity_repo.count_activity(user.id, since)
                rows.append(self._list_row(user, counts, now, user.id in pending_ids))
            matching_ids = None
            if needle:
                matching_ids = {u.id for u in await self.user_repo.list_users(search=needle)}
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list users: {e}") from e

        kpis = compute_kpis(rows)
        visible = [
            row for row in rows
            if _matches(row, resolved) and (matching_ids is None or row["id"] in matching_ids)
        ]
        return {"users": visible, "kpis": kpis}

    def _list_row(self, user: Profile, counts, now, application_pending: bool) -> Dict[str, Any]:
        assessment = assess_user(user, counts)
        row = user.to_dict()
        row["alumniApplicationPending"] = application_pending
        row["engagementScore"] = assessment.score
        row["churnRisk"] = assessment.risk.value if assessment.risk else None
        row.update(trial_status(user, now))
        return row

    async def get_user_detail(self, user_id: str) -> Dict[str, Any]:
        """
        Aggregate the admin detail view for one user.

        Raises:
            NotFoundError: user_id does not resolve
            StorageError: any database failure while reading
        """
        now = self.clock()
        try:
            user = await self.user_repo.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")

            stats_7_days = await self.activity_repo.count_activity(
                user_id, now - timedelta(days=ACTIVITY_WINDOW_DAYS)
            )
            stats_30_days = await self.activity_repo.count_activity(
                user_id, now - timedelta(days=EXTENDED_WINDOW_DAYS)
            )
            stats = {
                "bookmarkCount": await self.activity_repo.count_bookmarks(user_id),
                "watchHistoryCount": await self.activity_repo.count_watch_history(user_id),
                "completedCount": await self.activity_repo.count_watch_history(user_id, completed=True),
            }
            recent_history = await self.activity_repo.recent_watch_history(user_id, limit=5)
            recent_bookmarks = await self.activity_repo.recent_bookmarks(user_id, limit=5)
            recent_activities = await self.activity_repo.recent_activities(user_id, limit=10)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load user {user_id}: {e}") from e

        assessment = assess_user(user, stats_7_days)
        return {
            "user": user.to_dict(),
            "stats": stats,
            "stats7Days": stats_7_days.to_dict(),
            "stats30Days": stats_30_days.to_dict(),
            "engagementScore": assessment.score,
            "churnRisk": assessment.risk.value if assessment.risk else None,
            "churnReason": assessment.reason,
            **trial_status(user, now),
            "recentHistory": recent_history,
            "recentBookmarks": recent_bookmarks,
            "recentActivities": [a.to_dict() for a in recent_activities],
        }

    async def record_activity(
        self,
        user_id: str,
        activity_type: Any,
        target_id: Optional[str] = None,
        target_title: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Append one event to the activity log.
        Super users are never tracked; a login also stamps last_login_at.
        """
        try:
            resolved = ActivityType(activity_type)
        except ValueError:
            raise ValidationError(f"Unsupported activity type: {activity_type!r}")

        now = self.clock()
        try:
            user = await self.user_repo.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            if user.is_super_user:
                return {"recorded": False, "skipped": True}

            activity = await self.activity_repo.record_activity(
                user_id,
                resolved.value,
                created_at=now,
                target_id=target_id,
                target_title=target_title,
            )
            if resolved == ActivityType.LOGIN:
                await self.user_repo.update_user(user, {"last_login_at": now})
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to record activity for user {user_id}: {e}") from e

        return {"recorded": True, "skipped": False, "activity": activity.to_dict()}
