"""
Single source of "now" for every time-relative computation
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (the form stored in the database)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """
    FastAPI dependency returning the clock used by services.
    Tests override it with a fixed instant.
    """
    return utc_now
