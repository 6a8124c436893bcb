"""
Trial status helpers - trial expiry is passive, derived from trial_ends_at and "now"
"""
import math
from datetime import datetime
from typing import Optional

from config.settings import PLAN_TRIAL
from database_models import Profile


def days_remaining(trial_ends_at: Optional[datetime], now: datetime) -> Optional[int]:
    """
    Whole days left in the trial, rounded up.

    Args:
        trial_ends_at: Stored trial end (None if never set)
        now: Current instant

    Returns:
        Days remaining (zero or negative once expired), or None without an end date
    """
    if trial_ends_at is None:
        return None
    return math.ceil((trial_ends_at - now).total_seconds() / 86400)


def is_trial_expired(user: Profile, now: datetime) -> bool:
    """
    A trial is expired when:
    1. User is NOT a super user (super users never expire)
    2. User is still on the trial plan
    3. trial_ends_at is set and not in the future
    """
    if user.is_super_user or user.plan_type != PLAN_TRIAL:
        return False
    if user.trial_ends_at is None:
        return False
    return user.trial_ends_at <= now


def trial_status(user: Profile, now: datetime) -> dict:
    """Trial fields added to admin list and detail rows; empty values for super users."""
    if user.is_super_user:
        return {"trialDaysRemaining": None, "trialExpired": False}
    return {
        "trialDaysRemaining": days_remaining(user.trial_ends_at, now),
        "trialExpired": is_trial_expired(user, now),
    }
