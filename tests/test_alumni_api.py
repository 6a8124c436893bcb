"""
Integration tests for the alumni application and review endpoints
"""
import pytest

from tests.conftest import FIXED_NOW, create_profile, reload_profile


async def create_batch(async_client, batch_number=5, name="Batch 5"):
    response = await async_client.post(
        "/api/admin/alumni/batches",
        json={"batchNumber": batch_number, "name": name, "graduationDate": "2024-09-30T00:00:00Z"},
    )
    assert response.status_code == 200
    return response.json()["data"]["batch"]


@pytest.mark.asyncio
async def test_apply_review_and_status_flow(async_client, test_db):
    batch = await create_batch(async_client)
    assert batch["graduation_date"] == "2024-09-30T00:00:00"
    user = await create_profile(test_db)
    user_id = user.id

    response = await async_client.post("/api/alumni/apply", json={"userId": user_id, "batchNumber": 5})
    assert response.status_code == 200
    assert response.json()["message"] == "Application submitted successfully"
    application_id = response.json()["data"]["application"]["id"]

    listed = await async_client.get("/api/admin/alumni", params={"status": "pending"})
    assert listed.status_code == 200
    assert [a["id"] for a in listed.json()["data"]["applications"]] == [application_id]

    users = await async_client.get("/api/admin/users", params={"filter": "alumniPending"})
    assert users.json()["data"]["kpis"]["alumniPending"] == 1

    review = await async_client.put("/api/admin/alumni", json={"id": application_id, "action": "approve"})
    assert review.status_code == 200
    assert review.json()["message"] == "Approved successfully"

    status = await async_client.get("/api/alumni/status", params={"userId": user_id})
    body = status.json()["data"]
    assert body["application"]["status"] == "approved"
    assert body["profile"]["is_alumni"] is True
    assert body["profile"]["alumni_batch_number"] == 5
    assert body["profile"]["alumni_approved_at"] == FIXED_NOW.isoformat()

    reloaded = await reload_profile(test_db, user_id)
    assert reloaded.is_alumni is True


@pytest.mark.asyncio
async def test_apply_with_invalid_batch_is_400(async_client, test_db):
    await create_batch(async_client)
    user = await create_profile(test_db)

    response = await async_client.post("/api/alumni/apply", json={"userId": user.id, "batchNumber": 42})

    assert response.status_code == 400
    assert response.json()["ok"] is False
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_duplicate_application_is_409(async_client, test_db):
    await create_batch(async_client)
    user = await create_profile(test_db)
    await async_client.post("/api/alumni/apply", json={"userId": user.id, "batchNumber": 5})

    response = await async_client.post("/api/alumni/apply", json={"userId": user.id, "batchNumber": 5})

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_review_unknown_application_is_404(async_client):
    response = await async_client.put("/api/admin/alumni", json={"id": 999, "action": "reject"})

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_batches_endpoint_lists_active_batches(async_client):
    await create_batch(async_client, 2, "Batch 2")
    await create_batch(async_client, 1, "Batch 1")

    response = await async_client.get("/api/alumni/batches")

    assert response.status_code == 200
    assert [b["name"] for b in response.json()["data"]["batches"]] == ["Batch 1", "Batch 2"]
