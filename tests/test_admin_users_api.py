"""
Integration tests for the admin user endpoints and activity tracking
"""
from datetime import datetime, timedelta

import pytest

from tests.conftest import FIXED_NOW, create_profile, reload_profile


@pytest.mark.asyncio
async def test_bulk_extend_trial_reports_per_user_results(async_client, test_db):
    users = [await create_profile(test_db, trial_ends_at=datetime(2025, 1, 1)) for _ in range(5)]
    ids = [u.id for u in users[:4]] + ["unknown-id"]

    response = await async_client.patch(
        "/api/admin/users",
        json={"userIds": ids, "action": "extendTrial"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["message"] == "4 succeeded, 1 failed"
    assert body["data"]["successCount"] == 4
    assert body["data"]["failed"] == [
        {"userId": "unknown-id", "error": "not_found", "message": "User unknown-id not found"}
    ]
    for user in users[:4]:
        reloaded = await reload_profile(test_db, user.id)
        assert reloaded.trial_ends_at == datetime(2025, 1, 31)
    untouched = await reload_profile(test_db, users[4].id)
    assert untouched.trial_ends_at == datetime(2025, 1, 1)


@pytest.mark.asyncio
async def test_bulk_set_trial_days_uses_injected_clock(async_client, test_db):
    user = await create_profile(test_db)

    response = await async_client.patch(
        "/api/admin/users",
        json={"userIds": [user.id], "action": "setTrialDays", "value": 500},
    )

    assert response.status_code == 200
    reloaded = await reload_profile(test_db, user.id)
    assert reloaded.trial_ends_at == FIXED_NOW + timedelta(days=120)


@pytest.mark.asyncio
async def test_bulk_empty_selection(async_client):
    response = await async_client.patch("/api/admin/users", json={"userIds": [], "action": "approveAlumni"})

    assert response.status_code == 200
    assert response.json()["data"]["successCount"] == 0
    assert response.json()["data"]["failureCount"] == 0


@pytest.mark.asyncio
async def test_bulk_unknown_action_is_400_without_writes(async_client, test_db):
    user = await create_profile(test_db, trial_ends_at=datetime(2025, 1, 1))

    response = await async_client.patch(
        "/api/admin/users",
        json={"userIds": [user.id], "action": "toggleRole", "value": "admin"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    reloaded = await reload_profile(test_db, user.id)
    assert reloaded.trial_ends_at == datetime(2025, 1, 1)


@pytest.mark.asyncio
async def test_bulk_non_numeric_days_is_400(async_client, test_db):
    user = await create_profile(test_db)

    response = await async_client.patch(
        "/api/admin/users",
        json={"userIds": [user.id], "action": "setTrialDays", "value": "soon"},
    )

    assert response.status_code == 400
    assert response.json()["ok"] is False


@pytest.mark.asyncio
async def test_user_detail_endpoint(async_client, test_db):
    user = await create_profile(test_db, display_name="Mei")

    response = await async_client.get(f"/api/admin/users/{user.id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["display_name"] == "Mei"
    assert data["engagementScore"] == 0
    assert data["churnRisk"] == "high"
    assert data["stats"] == {"bookmarkCount": 0, "watchHistoryCount": 0, "completedCount": 0}


@pytest.mark.asyncio
async def test_user_detail_not_found(async_client):
    response = await async_client.get("/api/admin/users/nobody")

    assert response.status_code == 404
    assert response.json() == {
        "ok": False,
        "data": {},
        "error": "not_found",
        "message": "User nobody not found",
    }


@pytest.mark.asyncio
async def test_list_users_endpoint_with_high_risk_filter(async_client, test_db):
    active = await create_profile(test_db, email="busy@example.com")
    await create_profile(test_db, email="quiet@example.com")
    await create_profile(test_db, email="root@example.com", is_super_user=True)

    for _ in range(3):
        response = await async_client.post(
            "/api/activities",
            json={"userId": active.id, "activityType": "login"},
        )
        assert response.status_code == 200

    response = await async_client.get("/api/admin/users", params={"filter": "highRisk"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [row["email"] for row in data["users"]] == ["quiet@example.com"]
    assert data["kpis"]["total"] == 3
    assert data["kpis"]["highRisk"] == 1
    assert data["kpis"]["superUser"] == 1


@pytest.mark.asyncio
async def test_list_users_unknown_filter_is_400(async_client):
    response = await async_client.get("/api/admin/users", params={"filter": "vip"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_activity_for_super_user_is_skipped(async_client, test_db):
    user = await create_profile(test_db, is_super_user=True)

    response = await async_client.post(
        "/api/activities",
        json={"userId": user.id, "activityType": "search"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["skipped"] is True


@pytest.mark.asyncio
async def test_activity_unknown_type_is_400(async_client, test_db):
    user = await create_profile(test_db)

    response = await async_client.post(
        "/api/activities",
        json={"userId": user.id, "activityType": "dance"},
    )

    assert response.status_code == 400
