import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey

from database import Base
from utils.clock import utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    """
    Learning-portal account.
    Trial, subscription and alumni state are all stored on the profile row.
    """
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=_new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")

    # trial | paid
    plan_type = Column(String, nullable=False, default="trial")
    # monthly | yearly | None
    subscription_type = Column(String, nullable=True)
    trial_ends_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    next_renewal_at = Column(DateTime, nullable=True)

    is_super_user = Column(Boolean, nullable=False, default=False)

    is_alumni = Column(Boolean, nullable=False, default=False)
    alumni_batch_number = Column(Integer, nullable=True)
    alumni_approved_at = Column(DateTime, nullable=True)

    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role,
            "plan_type": self.plan_type,
            "subscription_type": self.subscription_type,
            "trial_ends_at": _iso(self.trial_ends_at),
            "paid_at": _iso(self.paid_at),
            "next_renewal_at": _iso(self.next_renewal_at),
            "is_super_user": self.is_super_user,
            "is_alumni": self.is_alumni,
            "alumni_batch_number": self.alumni_batch_number,
            "alumni_approved_at": _iso(self.alumni_approved_at),
            "last_login_at": _iso(self.last_login_at),
            "created_at": _iso(self.created_at),
        }


class UserActivity(Base):
    """Raw activity event (login, video_view, search, ...)"""
    __tablename__ = "user_activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    activity_type = Column(String, nullable=False, index=True)
    target_id = Column(String, nullable=True)
    target_title = Column(String, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "activity_type": self.activity_type,
            "target_id": self.target_id,
            "target_title": self.target_title,
            "created_at": _iso(self.created_at),
        }


class Video(Base):
    __tablename__ = "videos"

    id = Column(String, primary_key=True, default=_new_id)
    title = Column(String, nullable=False)


class WatchHistory(Base):
    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    video_id = Column(String, ForeignKey("videos.id"), nullable=False)
    watched_at = Column(DateTime, default=utc_now, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)


class Bookmark(Base):
    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    video_id = Column(String, ForeignKey("videos.id"), nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)


class AlumniBatch(Base):
    """Cohort a user can claim when applying for alumni status"""
    __tablename__ = "alumni_batches"

    batch_number = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    graduation_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "batch_number": self.batch_number,
            "name": self.name,
            "graduation_date": _iso(self.graduation_date),
            "is_active": self.is_active,
        }


class AlumniApplication(Base):
    """
    One alumni application per user.
    A rejected application is reused (back to pending) when the user applies again.
    """
    __tablename__ = "alumni_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, unique=True, index=True)
    batch_number = Column(Integer, ForeignKey("alumni_batches.batch_number"), nullable=False)
    # pending | approved | rejected
    status = Column(String, nullable=False, default="pending", index=True)
    applied_at = Column(DateTime, default=utc_now, nullable=False)
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "batch_number": self.batch_number,
            "status": self.status,
            "applied_at": _iso(self.applied_at),
            "approved_at": _iso(self.approved_at),
            "approved_by": self.approved_by,
            "rejection_reason": self.rejection_reason,
        }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
