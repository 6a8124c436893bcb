"""
Unit tests for UserRepository and ActivityRepository
"""
from datetime import timedelta

import pytest

from crud.activity import ActivityRepository
from crud.user import UserRepository
from tests.conftest import FIXED_NOW


@pytest.mark.asyncio
async def test_create_and_get_user(test_db):
    """
    Test creating a new user and retrieving it by email and by id.
    """
    user_repo = UserRepository(test_db)

    created_user = await user_repo.create_user({
        "email": "Learner@Example.com",
        "display_name": "Learner",
        "trial_ends_at": FIXED_NOW + timedelta(days=14),
    })
    await test_db.commit()

    # Email should be lowercased, defaults applied
    assert created_user.email == "learner@example.com"
    assert created_user.plan_type == "trial"
    assert created_user.is_super_user is False
    assert created_user.is_alumni is False

    by_email = await user_repo.get_user_by_email("LEARNER@example.com")
    by_id = await user_repo.get_user_by_id(created_user.id)
    assert by_email is not None
    assert by_id is not None
    assert by_email.id == by_id.id == created_user.id
    assert await user_repo.get_user_by_id("missing") is None


@pytest.mark.asyncio
async def test_update_user_applies_partial_fields(test_db):
    user_repo = UserRepository(test_db)
    user = await user_repo.create_user({"email": "partial@example.com", "trial_ends_at": FIXED_NOW})

    updated = await user_repo.update_user(user, {"trial_ends_at": FIXED_NOW + timedelta(days=3), "unknown": 1})

    assert updated.trial_ends_at == FIXED_NOW + timedelta(days=3)
    assert updated.email == "partial@example.com"
    assert not hasattr(updated, "unknown")


@pytest.mark.asyncio
async def test_list_users_search(test_db):
    user_repo = UserRepository(test_db)
    await user_repo.create_user({"email": "sato@example.com", "display_name": "Sato Yui"})
    await user_repo.create_user({"email": "tanaka@example.com", "display_name": "Tanaka Ren"})
    await test_db.commit()

    assert len(await user_repo.list_users()) == 2
    found = await user_repo.list_users(search="yui")
    assert [u.email for u in found] == ["sato@example.com"]
    found = await user_repo.list_users(search="TANAKA@")
    assert [u.email for u in found] == ["tanaka@example.com"]


@pytest.mark.asyncio
async def test_activity_counts_respect_window(test_db):
    user = await UserRepository(test_db).create_user({"email": "window@example.com"})
    activity_repo = ActivityRepository(test_db)
    since = FIXED_NOW - timedelta(days=7)

    await activity_repo.record_activity(user.id, "login", created_at=since)
    await activity_repo.record_activity(user.id, "login", created_at=since - timedelta(seconds=1))
    await activity_repo.record_activity(user.id, "bookmark_add", created_at=FIXED_NOW)
    await activity_repo.record_activity(user.id, "bookmark_remove", created_at=FIXED_NOW)
    await test_db.commit()

    # Window start is inclusive
    assert await activity_repo.count_events(user.id, "login", since) == 1
    counts = await activity_repo.count_activity(user.id, since)
    assert counts.login == 1
    assert counts.bookmark_add == 1
    assert counts.video_view == 0
