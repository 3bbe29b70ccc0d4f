from __future__ import annotations

from datetime import date

from toiletcheck.tests.utils.api import api_client
from toiletcheck.tests.utils.auth import create_test_user
from toiletcheck.tests.utils.fixtures import create_inspection_row, create_site


async def test_register_list_and_delete_photos() -> None:
    owner_id, owner_headers = await create_test_user(role="inspector")
    _other_id, other_headers = await create_test_user(role="inspector")
    admin_id, admin_headers = await create_test_user(role="admin")
    _org_id, _building_id, location_id = await create_site()
    async with api_client() as client:
        unowned = await client.post(
            "/api/photos", headers=owner_headers, json={"file_url": "https://cdn.test/a.jpg"}
        )
        created = await client.post(
            "/api/photos",
            headers=owner_headers,
            json={"file_url": "https://cdn.test/a.jpg", "location_id": location_id, "caption": "sink"},
        )
        photo_id = created.json()["data"]["id"]
        listing = await client.get(f"/api/photos?location_id={location_id}", headers=other_headers)
        foreign_delete = await client.delete(f"/api/photos?id={photo_id}", headers=other_headers)
        admin_delete = await client.delete(f"/api/photos?id={photo_id}", headers=admin_headers)
        after = await client.get(f"/api/photos?location_id={location_id}", headers=owner_headers)

    assert unowned.status_code == 400
    assert created.json()["data"]["created_by"] == owner_id
    assert [photo["id"] for photo in listing.json()["data"]] == [photo_id]
    assert foreign_delete.status_code == 403
    assert admin_delete.json()["data"]["deleted_by"] == admin_id
    assert admin_delete.json()["data"]["is_deleted"] is True
    assert after.json()["data"] == []


async def test_inspection_photos_are_limited_to_owner_and_admins() -> None:
    owner_id, owner_headers = await create_test_user(role="inspector")
    _other_id, other_headers = await create_test_user(role="inspector")
    _admin_id, admin_headers = await create_test_user(role="admin")
    _org_id, _building_id, location_id = await create_site()
    inspection_id = await create_inspection_row(
        user_id=owner_id, location_id=location_id, inspection_date=date(2024, 11, 5)
    )
    photo = {"file_url": "https://cdn.test/b.jpg", "inspection_id": inspection_id}
    async with api_client() as client:
        created = await client.post("/api/photos", headers=owner_headers, json=photo)
        foreign_list = await client.get(f"/api/photos?inspection_id={inspection_id}", headers=other_headers)
        foreign_register = await client.post("/api/photos", headers=other_headers, json=photo)
        admin_list = await client.get(f"/api/photos?inspection_id={inspection_id}", headers=admin_headers)
        unknown = await client.get("/api/photos?inspection_id=nope", headers=owner_headers)
        owner_list = await client.get(f"/api/photos?inspection_id={inspection_id}", headers=owner_headers)

    assert created.status_code == 200
    assert foreign_list.status_code == 403
    assert foreign_list.json()["error"] == "Access denied - not your inspection"
    assert foreign_register.status_code == 403
    assert len(admin_list.json()["data"]) == 1
    assert unknown.status_code == 404
    assert [item["id"] for item in owner_list.json()["data"]] == [created.json()["data"]["id"]]
