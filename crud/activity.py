"""
ActivityRepository for the activity log, watch history and bookmarks
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from database_models import UserActivity, WatchHistory, Bookmark, Video
from models.activity import ActivityCounts, SCORED_ACTIVITY_FIELDS


class ActivityRepository:
    """
    Read/write access to per-user activity data.
    Counts returned here are trusted as-is by the engagement scorer.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_events(self, user_id: str, event_type: str, since: datetime) -> int:
        """Count one event type for a user since the given instant (inclusive)."""
        result = await self.db.execute(
            select(func.count(UserActivity.id)).where(
                UserActivity.user_id == user_id,
                UserActivity.activity_type == event_type,
                UserActivity.created_at >= since,
            )
        )
        return int(result.scalar_one())

    async def count_activity(self, user_id: str, since: datetime) -> ActivityCounts:
        """
        Count all scored event types for a user in one grouped query.

        Args:
            user_id: Profile ID
            since: Start of the window (inclusive)

        Returns:
            ActivityCounts for the window
        """
        result = await self.db.execute(
            select(UserActivity.activity_type, func.count(UserActivity.id))
            .where(
                UserActivity.user_id == user_id,
                UserActivity.created_at >= since,
                UserActivity.activity_type.in_(list(SCORED_ACTIVITY_FIELDS)),
            )
            .group_by(UserActivity.activity_type)
        )
        return ActivityCounts.from_type_counts(dict(result.all()))

    async def record_activity(
        self,
        user_id: str,
        activity_type: str,
        created_at: datetime,
        target_id: Optional[str] = None,
        target_title: Optional[str] = None,
    ) -> UserActivity:
        activity = UserActivity(
            user_id=user_id,
            activity_type=activity_type,
            target_id=target_id,
            target_title=target_title,
            created_at=created_at,
        )
        self.db.add(activity)
        await self.db.flush()
        await self.db.refresh(activity)
        return activity

    async def count_bookmarks(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Bookmark.id)).where(Bookmark.user_id == user_id)
        )
        return int(result.scalar_one())

    async def count_watch_history(self, user_id: str, completed: Optional[bool] = None) -> int:
        """Count watch-history rows; pass completed=True to count finished videos only."""
        stmt = select(func.count(WatchHistory.id)).where(WatchHistory.user_id == user_id)
        if completed is not None:
            stmt = stmt.where(WatchHistory.completed == completed)
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def recent_watch_history(self, user_id: str, limit: int = 5) -> List[dict]:
        result = await self.db.execute(
            select(WatchHistory.watched_at, WatchHistory.completed, Video.title)
            .join(Video, Video.id == WatchHistory.video_id)
            .where(WatchHistory.user_id == user_id)
            .order_by(WatchHistory.watched_at.desc())
            .limit(limit)
        )
        return [
            {
                "watched_at": watched_at.isoformat(),
                "completed": completed,
                "video_title": title,
            }
            for watched_at, completed, title in result.all()
        ]

    async def recent_bookmarks(self, user_id: str, limit: int = 5) -> List[dict]:
        result = await self.db.execute(
            select(Bookmark.created_at, Video.title)
            .join(Video, Video.id == Bookmark.video_id)
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc())
            .limit(limit)
        )
        return [
            {"created_at": created_at.isoformat(), "video_title": title}
            for created_at, title in result.all()
        ]

    async def recent_activities(self, user_id: str, limit: int = 10) -> List[UserActivity]:
        result = await self.db.execute(
            select(UserActivity)
            .where(UserActivity.user_id == user_id)
            .order_by(UserActivity.created_at.desc(), UserActivity.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
