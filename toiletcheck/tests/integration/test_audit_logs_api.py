from __future__ import annotations

from toiletcheck.services.audit import create_audit_log
from toiletcheck.tests.utils.api import api_client
from toiletcheck.tests.utils.auth import create_test_user


async def test_audit_logs_filters_and_limit() -> None:
    admin_id, headers = await create_test_user(role="admin")
    await create_audit_log(admin_id, "CREATE_BUILDING", "building", "b-1", {"name": "Tower"})
    await create_audit_log(admin_id, "DELETE_BUILDING", "building", "b-1", success=False, error_message="boom")
    await create_audit_log("someone", "CREATE_BUILDING", "building", "b-2")
    async with api_client() as client:
        everything = await client.get("/api/admin/audit-logs", headers=headers)
        failures = await client.get("/api/admin/audit-logs?success=false", headers=headers)
        mine = await client.get(
            f"/api/admin/audit-logs?userId={admin_id}&action=CREATE_BUILDING", headers=headers
        )
        limited = await client.get("/api/admin/audit-logs?limit=1", headers=headers)
        future = await client.get("/api/admin/audit-logs?since=2999-01-01T00:00:00Z", headers=headers)
        bad_since = await client.get("/api/admin/audit-logs?since=yesterday", headers=headers)

    body = everything.json()["data"]
    assert body["count"] == 3
    assert body["filters"]["limit"] == 50
    # Newest first.
    assert [log["resource_id"] for log in body["logs"]] == ["b-2", "b-1", "b-1"]
    assert [log["action"] for log in failures.json()["data"]["logs"]] == ["DELETE_BUILDING"]
    assert failures.json()["data"]["logs"][0]["error_message"] == "boom"
    assert mine.json()["data"]["count"] == 1
    assert limited.json()["data"]["count"] == 1
    assert future.json()["data"]["count"] == 0
    assert bad_since.status_code == 400


async def test_audit_logs_require_admin() -> None:
    _user_id, headers = await create_test_user(role="manager")
    async with api_client() as client:
        response = await client.get("/api/admin/audit-logs", headers=headers)
    assert response.status_code == 403


async def test_audit_logs_limit_is_typed_and_capped() -> None:
    _admin_id, headers = await create_test_user(role="admin")
    async with api_client() as client:
        capped = await client.get("/api/admin/audit-logs?limit=10000", headers=headers)
        zero = await client.get("/api/admin/audit-logs?limit=0", headers=headers)
        not_a_number = await client.get("/api/admin/audit-logs?limit=ten", headers=headers)
        since = await client.get("/api/admin/audit-logs?since=2024-11-05T08:00:00Z", headers=headers)
    assert capped.json()["data"]["filters"]["limit"] == 500
    assert zero.status_code == 400
    assert not_a_number.status_code == 400
    assert not_a_number.json()["error"].startswith("Invalid request: limit")
    assert since.json()["data"]["filters"]["since"].startswith("2024-11-05T08:00:00")
