from dataclasses import dataclass
from enum import Enum


class ActivityType(str, Enum):
    LOGIN = "login"
    VIDEO_VIEW = "video_view"
    VIDEO_COMPLETE = "video_complete"
    ARTICLE_VIEW = "article_view"
    RESOURCE_DOWNLOAD = "resource_download"
    BOOKMARK_ADD = "bookmark_add"
    BOOKMARK_REMOVE = "bookmark_remove"
    SEARCH = "search"


# Event types that feed the engagement score, keyed by ActivityCounts field
SCORED_ACTIVITY_FIELDS = {
    ActivityType.LOGIN.value: "login",
    ActivityType.VIDEO_VIEW.value: "video_view",
    ActivityType.ARTICLE_VIEW.value: "article_view",
    ActivityType.SEARCH.value: "search",
    ActivityType.BOOKMARK_ADD.value: "bookmark_add",
}


@dataclass(frozen=True)
class ActivityCounts:
    """Per-user event counters over a trailing window."""
    login: int = 0
    video_view: int = 0
    article_view: int = 0
    search: int = 0
    bookmark_add: int = 0

    @classmethod
    def from_type_counts(cls, counts: dict) -> "ActivityCounts":
        """Build from a {activity_type: count} mapping; unscored types are ignored."""
        kwargs = {}
        for activity_type, field_name in SCORED_ACTIVITY_FIELDS.items():
            kwargs[field_name] = int(counts.get(activity_type, 0) or 0)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "login": self.login,
            "videoView": self.video_view,
            "articleView": self.article_view,
            "search": self.search,
            "bookmarkAdd": self.bookmark_add,
        }
