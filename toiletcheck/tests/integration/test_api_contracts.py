from __future__ import annotations

import pytest

from toiletcheck.tests.utils.api import api_client
from toiletcheck.tests.utils.auth import bearer, create_test_user


async def test_health_uses_success_envelope() -> None:
    async with api_client() as client:
        response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == {"status": "ok"}
    assert body["timestamp"].endswith("Z")
    assert response.headers["X-Request-Id"]


async def test_verify_role_returns_server_resolved_role() -> None:
    user_id, headers = await create_test_user(role="super_admin")
    async with api_client() as client:
        response = await client.get("/api/auth/verify-role", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["userId"] == user_id
    assert data["role"]["name"] == "super_admin"
    assert data["role"]["level"] == 90
    assert data["isAdmin"] is True
    assert data["isSuperAdmin"] is True


async def test_verify_role_for_inspector() -> None:
    _user_id, headers = await create_test_user(role="inspector")
    async with api_client() as client:
        response = await client.get("/api/auth/verify-role", headers=headers)
    data = response.json()["data"]
    assert data["isAdmin"] is False
    assert data["isSuperAdmin"] is False


async def test_missing_token_is_forbidden_with_error_envelope() -> None:
    async with api_client() as client:
        response = await client.get("/api/auth/verify-role")
    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "Unauthorized"
    assert set(body) == {"error", "timestamp"}


async def test_lowercase_scheme_and_unknown_user_are_forbidden() -> None:
    user_id, headers = await create_test_user(role="admin")
    token = headers["Authorization"].split(" ", 1)[1]
    async with api_client() as client:
        lowercase = await client.get("/api/auth/verify-role", headers={"Authorization": f"bearer {token}"})
        ghost = await client.get("/api/auth/verify-role", headers=bearer("not-a-user"))
    assert lowercase.status_code == 403
    assert ghost.status_code == 403


async def test_unknown_route_and_method_use_error_envelope() -> None:
    async with api_client() as client:
        missing = await client.get("/api/nowhere")
        wrong_method = await client.put("/api/auth/verify-role")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Not found"
    assert wrong_method.status_code == 405
    assert wrong_method.json()["error"] == "Method not allowed"


async def test_invalid_query_type_is_bad_request() -> None:
    _user_id, headers = await create_test_user(role="admin")
    async with api_client() as client:
        response = await client.get("/api/admin/inspections?date=not-a-date", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request")


GUARDED_ENDPOINTS = [
    ("GET", "/api/auth/verify-role"),
    ("GET", "/api/admin/users"),
    ("GET", "/api/admin/users?roles=true"),
    ("POST", "/api/admin/users?action=assign-role"),
    ("POST", "/api/admin/users?action=toggle-status"),
    ("GET", "/api/admin/resources?type=organizations"),
    ("POST", "/api/admin/resources?type=organizations"),
    ("PATCH", "/api/admin/resources?type=organizations&id=x"),
    ("DELETE", "/api/admin/resources?type=organizations&id=x"),
    ("GET", "/api/admin/inspections"),
    ("GET", "/api/admin/audit-logs"),
    ("GET", "/api/admin/stats"),
    ("GET", "/api/inspections"),
    ("POST", "/api/inspections"),
    ("PATCH", "/api/inspections?id=x"),
    ("DELETE", "/api/inspections?id=x"),
    ("GET", "/api/locations?id=x"),
    ("GET", "/api/locations/scan?data=x"),
    ("GET", "/api/templates"),
    ("GET", "/api/profile"),
    ("PUT", "/api/profile"),
    ("GET", "/api/reports?month=2024-11"),
    ("GET", "/api/photos?location_id=x"),
    ("POST", "/api/photos"),
    ("DELETE", "/api/photos?id=x"),
]


@pytest.mark.parametrize(("method", "path"), GUARDED_ENDPOINTS)
async def test_guarded_endpoints_reject_missing_and_expired_tokens(method: str, path: str) -> None:
    user_id, _headers = await create_test_user(role="system_admin")
    async with api_client() as client:
        anonymous = await client.request(method, path, json={})
        expired = await client.request(method, path, json={}, headers=bearer(user_id, expires_in=-5))
    assert anonymous.status_code == 403
    assert expired.status_code == 403
