from __future__ import annotations

import csv
from datetime import date, datetime, timedelta, timezone
import io

from toiletcheck.tests.utils.api import api_client
from toiletcheck.tests.utils.auth import create_test_user, recently
from toiletcheck.tests.utils.fixtures import create_inspection_row, create_site


async def test_monthly_calendar_groups_by_date() -> None:
    user_id, headers = await create_test_user(role="inspector")
    _org_id, _building_id, location_id = await create_site()
    for day, score in ((date(2024, 11, 2), 90), (date(2024, 11, 2), 81), (date(2024, 11, 1), 40)):
        await create_inspection_row(
            user_id=user_id, location_id=location_id, inspection_date=day, responses={"score": score}
        )
    await create_inspection_row(user_id=user_id, location_id=location_id, inspection_date=date(2024, 10, 31))
    async with api_client() as client:
        response = await client.get("/api/reports?month=2024-11", headers=headers)
    groups = response.json()["data"]
    assert [group["date"] for group in groups] == ["2024-11-02", "2024-11-01"]
    assert groups[0]["averageScore"] == 86
    assert groups[0]["count"] == 2


async def test_single_date_and_analytics() -> None:
    user_id, headers = await create_test_user(role="inspector")
    _org_id, _building_id, location_id = await create_site()
    await create_inspection_row(
        user_id=user_id, location_id=location_id, inspection_date=date(2024, 11, 5), responses={"score": 90}
    )
    await create_inspection_row(
        user_id=user_id, location_id=location_id, inspection_date=date(2024, 10, 5), responses={"score": 60}
    )
    async with api_client() as client:
        single = await client.get("/api/reports?date=2024-11-05", headers=headers)
        analytics = await client.get("/api/reports?month=2024-11&analytics=true", headers=headers)
    assert [item["inspection_date"] for item in single.json()["data"]] == ["2024-11-05"]
    data = analytics.json()["data"]
    assert data["totalInspections"] == 1
    assert data["avgScore"] == 90
    assert data["trend"] == "up"
    assert data["trendPercentage"] == 50
    assert data["topLocations"][0]["name"] == "Lobby Toilet"


async def test_reports_scope_and_parameters() -> None:
    _user_id, headers = await create_test_user(role="inspector")
    other_id, _ = await create_test_user(role="inspector")
    async with api_client() as client:
        foreign = await client.get(f"/api/reports?month=2024-11&userId={other_id}", headers=headers)
        missing = await client.get("/api/reports", headers=headers)
        bad_month = await client.get("/api/reports?month=2024-13", headers=headers)
    assert foreign.status_code == 403
    assert foreign.json()["error"] == "Access denied - you can only view your own data"
    assert missing.status_code == 400
    assert missing.json()["error"] == "Missing required parameter: month or date"
    assert bad_month.status_code == 400
    assert bad_month.json()["error"] == "Invalid month format. Must be yyyy-MM (e.g., 2024-11)"


async def test_admin_sees_all_users() -> None:
    _admin_id, admin_headers = await create_test_user(role="admin")
    first_id, _ = await create_test_user(role="inspector")
    second_id, _ = await create_test_user(role="inspector")
    _org_id, _building_id, location_id = await create_site()
    for user_id in (first_id, second_id):
        await create_inspection_row(user_id=user_id, location_id=location_id, inspection_date=date(2024, 11, 5))
    async with api_client() as client:
        everyone = await client.get("/api/reports?date=2024-11-05", headers=admin_headers)
        one = await client.get(f"/api/reports?date=2024-11-05&userId={first_id}", headers=admin_headers)
    assert len(everyone.json()["data"]) == 2
    assert [item["user"]["id"] for item in one.json()["data"]] == [first_id]


async def test_admin_stats_counts() -> None:
    admin_id, headers = await create_test_user(role="admin", last_login_at=recently())
    await create_test_user(role="inspector", is_active=False)
    _org_id, _building_id, location_id = await create_site()
    today = datetime.now(timezone.utc).date()
    for day, score in ((today, 80), (today, 90), (today - timedelta(days=1), 70)):
        await create_inspection_row(
            user_id=admin_id, location_id=location_id, inspection_date=day, responses={"score": score}
        )
    async with api_client() as client:
        response = await client.get("/api/admin/stats", headers=headers)
    assert response.json()["data"] == {
        "totalUsers": 1,
        "totalLocations": 1,
        "totalInspections": 3,
        "todayInspections": 2,
        "activeUsers": 1,
        "avgScore": 80,
        "userGrowth": 0,
        "inspectionGrowth": 100,
    }


async def test_admin_inspections_filters() -> None:
    _admin_id, headers = await create_test_user(role="admin")
    inspector_id, inspector_headers = await create_test_user(role="inspector")
    _org_id, _building_id, location_id = await create_site()
    inspection_id = await create_inspection_row(
        user_id=inspector_id, location_id=location_id, inspection_date=date(2024, 11, 5)
    )
    await create_inspection_row(user_id=inspector_id, location_id=location_id, inspection_date=date(2024, 11, 6))
    async with api_client() as client:
        filtered = await client.get(
            f"/api/admin/inspections?user_id={inspector_id}&date=2024-11-05&limit=5", headers=headers
        )
        single = await client.get(f"/api/admin/inspections?id={inspection_id}", headers=headers)
        denied = await client.get("/api/admin/inspections", headers=inspector_headers)
    data = filtered.json()["data"]
    assert data["count"] == 1
    assert data["inspections"][0]["id"] == inspection_id
    assert data["filters"] == {
        "user_id": inspector_id,
        "location_id": None,
        "date": "2024-11-05",
        "limit": 5,
    }
    assert single.json()["data"]["user"]["id"] == inspector_id
    assert denied.status_code == 403


async def test_admin_inspections_limit_bounds() -> None:
    _admin_id, headers = await create_test_user(role="admin")
    async with api_client() as client:
        default = await client.get("/api/admin/inspections", headers=headers)
        zero = await client.get("/api/admin/inspections?limit=0", headers=headers)
        too_large = await client.get("/api/admin/inspections?limit=1001", headers=headers)
        not_a_number = await client.get("/api/admin/inspections?limit=abc", headers=headers)
    assert default.json()["data"]["filters"]["limit"] == 100
    assert zero.status_code == 400
    assert too_large.status_code == 400
    assert not_a_number.status_code == 400


async def test_reports_csv_export() -> None:
    user_id, headers = await create_test_user(role="inspector", full_name="Ana Inspector")
    _org_id, _building_id, location_id = await create_site(org_code="ACME")
    await create_inspection_row(
        user_id=user_id, location_id=location_id, inspection_date=date(2024, 11, 5), responses={"score": 75}
    )
    async with api_client() as client:
        monthly = await client.get("/api/reports?month=2024-11&format=csv", headers=headers)
        daily = await client.get("/api/reports?date=2024-11-05&format=csv", headers=headers)
        unsupported = await client.get("/api/reports?month=2024-11&format=xml", headers=headers)

    assert monthly.status_code == 200
    assert monthly.headers["content-type"].startswith("text/csv")
    assert monthly.headers["content-disposition"] == 'attachment; filename="inspections_2024-11.csv"'
    rows = list(csv.DictReader(io.StringIO(monthly.text)))
    assert len(rows) == 1
    assert rows[0]["Inspector Name"] == "Ana Inspector"
    assert rows[0]["Organization"] == "ACME Org"
    assert rows[0]["Building"] == "BLD Tower"
    assert rows[0]["Date"] == "2024-11-05"

    assert daily.headers["content-disposition"] == 'attachment; filename="inspections_2024-11-05.csv"'
    assert len(list(csv.DictReader(io.StringIO(daily.text)))) == 1
    assert unsupported.status_code == 400
    assert unsupported.json()["error"] == "Unsupported export format"
