import uuid

import pytest
from httpx import AsyncClient

from cafeshift.models.notification import NotificationType
from cafeshift.services.notification_service import create_notification
from tests.conftest import login_as


async def _seed(db, user, count=2):
    for i in range(count):
        create_notification(
            db,
            user_id=user.id,
            type=NotificationType.ANNOUNCEMENT,
            title=f"Notice {i}",
            message="Staff meeting on Friday",
        )
    await db.commit()


@pytest.mark.asyncio
async def test_mark_read_and_read_all(client: AsyncClient, db, employee):
    await _seed(db, employee, 3)
    await login_as(client, employee)

    listing = (await client.get("/api/notifications")).json()
    assert listing["unread_count"] == 3
    first_id = listing["notifications"][0]["id"]

    read = await client.put(f"/api/notifications/{first_id}/read")
    assert read.json()["notification"]["is_read"] is True

    unread = (await client.get("/api/notifications", params={"unread_only": True})).json()
    assert len(unread["notifications"]) == 2
    assert unread["unread_count"] == 2

    assert (await client.put("/api/notifications/read-all")).status_code == 200
    assert (await client.get("/api/notifications")).json()["unread_count"] == 0


@pytest.mark.asyncio
async def test_notifications_are_owner_scoped(client: AsyncClient, db, employee, coworker):
    await _seed(db, employee, 1)
    await login_as(client, employee)
    notification_id = (await client.get("/api/notifications")).json()["notifications"][0]["id"]

    await login_as(client, coworker)
    assert (await client.get("/api/notifications")).json()["notifications"] == []
    assert (await client.put(f"/api/notifications/{notification_id}/read")).status_code == 404
    assert (await client.delete(f"/api/notifications/{notification_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_notification(client: AsyncClient, db, employee):
    await _seed(db, employee, 1)
    await login_as(client, employee)
    notification_id = (await client.get("/api/notifications")).json()["notifications"][0]["id"]

    assert (await client.delete(f"/api/notifications/{notification_id}")).status_code == 200
    assert (await client.get("/api/notifications")).json()["notifications"] == []
    assert (await client.delete(f"/api/notifications/{uuid.uuid4()}")).status_code == 404
