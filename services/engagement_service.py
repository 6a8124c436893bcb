"""
Engagement score and churn-risk classification
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config.settings import ACTIVITY_WINDOW_DAYS
from models.activity import ActivityCounts

# Points per event over the trailing 7-day window
SCORE_WEIGHTS = {
    "login": 10,
    "video_view": 5,
    "article_view": 5,
    "search": 2,
    "bookmark_add": 3,
}

HIGH_RISK_MAX_SCORE = 10
MEDIUM_RISK_MAX_SCORE = 20


class ChurnRisk(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class EngagementAssessment:
    score: Optional[int]
    risk: Optional[ChurnRisk]
    reason: Optional[str]


def compute_engagement_score(counts: ActivityCounts) -> int:
    """
    Weighted sum of the 7-day activity counters.

    Negative counters are treated as 0. The result is not capped.
    """
    return sum(
        weight * max(0, int(getattr(counts, field_name)))
        for field_name, weight in SCORE_WEIGHTS.items()
    )


def classify_churn_risk(score: int) -> ChurnRisk:
    if score <= HIGH_RISK_MAX_SCORE:
        return ChurnRisk.HIGH
    if score <= MEDIUM_RISK_MAX_SCORE:
        return ChurnRisk.MEDIUM
    return ChurnRisk.LOW


def churn_reason(counts: ActivityCounts, risk: ChurnRisk) -> str:
    """Human-readable explanation shown next to the risk tier."""
    if risk == ChurnRisk.HIGH:
        if counts.login <= 0:
            return f"No login in the last {ACTIVITY_WINDOW_DAYS} days"
        return f"Very low engagement ({HIGH_RISK_MAX_SCORE} points or less)"
    if risk == ChurnRisk.MEDIUM:
        return f"Low engagement ({HIGH_RISK_MAX_SCORE + 1}-{MEDIUM_RISK_MAX_SCORE} points)"
    return "Active"


def assess_user(user, counts: ActivityCounts) -> EngagementAssessment:
    """
    Score and classify one user.
    Super users are not scored; every field comes back as None.
    """
    if user.is_super_user:
        return EngagementAssessment(score=None, risk=None, reason=None)

    score = compute_engagement_score(counts)
    risk = classify_churn_risk(score)
    return EngagementAssessment(score=score, risk=risk, reason=churn_reason(counts, risk))
