from datetime import datetime

import pytest
from httpx import AsyncClient

from cafeshift.services.time_off_service import count_leave_days
from tests.conftest import login_as

YEAR = datetime.utcnow().year


def _request_body(leave_type="vacation", start_day=2, end_day=4):
    return {
        "start_date": datetime(YEAR, 3, start_day).isoformat(),
        "end_date": datetime(YEAR, 3, end_day).isoformat(),
        "type": leave_type,
        "reason": "Trip",
    }


def test_count_leave_days_is_inclusive():
    assert count_leave_days(datetime(2026, 3, 2), datetime(2026, 3, 2)) == 1
    assert count_leave_days(datetime(2026, 3, 2), datetime(2026, 3, 4)) == 3
    assert count_leave_days(datetime(2026, 3, 2), datetime(2026, 3, 3, 12)) == 3


@pytest.mark.asyncio
async def test_request_notifies_managers_and_queues_approval(client: AsyncClient, manager, employee):
    await login_as(client, employee)
    response = await client.post("/api/time-off-requests", json=_request_body())
    assert response.status_code == 201, response.text
    assert response.json()["request"]["status"] == "pending"

    await login_as(client, manager)
    notifications = (await client.get("/api/notifications")).json()
    assert notifications["unread_count"] == 1
    assert notifications["notifications"][0]["title"] == "New Time Off Request"

    approvals = (await client.get("/api/approvals")).json()["approvals"]
    assert [a["type"] for a in approvals] == ["leave_request"]


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(client: AsyncClient, employee):
    await login_as(client, employee)
    response = await client.post("/api/time-off-requests", json=_request_body(start_day=5, end_day=4))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_approval_updates_balance(client: AsyncClient, manager, employee):
    await login_as(client, employee)
    request_id = (await client.post("/api/time-off-requests", json=_request_body())).json()["request"]["id"]

    await login_as(client, manager)
    approved = await client.put(f"/api/time-off-requests/{request_id}/approve")
    assert approved.json()["request"]["status"] == "approved"
    assert approved.json()["request"]["approved_by"] == str(manager.id)

    again = await client.put(f"/api/time-off-requests/{request_id}/reject")
    assert again.status_code == 400

    assert (await client.get("/api/approvals")).json()["approvals"] == []

    await login_as(client, employee)
    balance = (await client.get("/api/time-off-balance")).json()
    assert balance["vacation"] == 12
    assert balance["sick"] == 10
    assert balance["used"]["vacation"] == 3
    assert balance["allowance"]["personal"] == 5

    notifications = (await client.get("/api/notifications")).json()["notifications"]
    assert notifications[0]["title"] == "Time Off Request Approved"


@pytest.mark.asyncio
async def test_rejected_leave_is_not_counted(client: AsyncClient, manager, employee):
    await login_as(client, employee)
    request_id = (await client.post("/api/time-off-requests", json=_request_body("sick"))).json()["request"]["id"]

    await login_as(client, manager)
    await client.put(f"/api/time-off-requests/{request_id}/reject")

    await login_as(client, employee)
    balance = (await client.get("/api/time-off-balance")).json()
    assert balance["sick"] == 10


@pytest.mark.asyncio
async def test_employees_see_only_their_requests(client: AsyncClient, manager, employee, coworker):
    await login_as(client, employee)
    await client.post("/api/time-off-requests", json=_request_body())
    await login_as(client, coworker)
    await client.post("/api/time-off-requests", json=_request_body("personal"))

    mine = (await client.get("/api/time-off-requests")).json()["requests"]
    assert [r["user_id"] for r in mine] == [str(coworker.id)]

    await login_as(client, manager)
    everyone = (await client.get("/api/time-off-requests")).json()["requests"]
    assert len(everyone) == 2
    pending = (await client.get("/api/time-off-requests", params={"status": "approved"})).json()["requests"]
    assert pending == []


@pytest.mark.asyncio
async def test_employee_cannot_approve(client: AsyncClient, employee, coworker):
    await login_as(client, employee)
    request_id = (await client.post("/api/time-off-requests", json=_request_body())).json()["request"]["id"]

    await login_as(client, coworker)
    response = await client.put(f"/api/time-off-requests/{request_id}/approve")
    assert response.status_code == 403
