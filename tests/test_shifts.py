from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from tests.conftest import login_as, make_shift

SHIFT_START = datetime(2026, 4, 6, 6)


@pytest.mark.asyncio
async def test_manager_creates_and_lists_shifts(client: AsyncClient, manager, employee):
    await login_as(client, manager)
    response = await client.post(
        "/api/shifts",
        json={
            "user_id": str(employee.id),
            "start_time": "2026-04-06T06:00:00+08:00",
            "end_time": "2026-04-06T14:00:00+08:00",
            "position": "Barista",
        },
    )
    assert response.status_code == 201, response.text
    shift = response.json()["shift"]
    # Offsets are normalised to naive UTC
    assert shift["start_time"].startswith("2026-04-05T22:00:00")
    assert shift["status"] == "scheduled"

    branch_shifts = (await client.get("/api/shifts/branch")).json()["shifts"]
    assert [s["user"]["id"] for s in branch_shifts] == [str(employee.id)]

    own = (await client.get("/api/shifts", params={"user_id": str(employee.id)})).json()["shifts"]
    assert len(own) == 1


@pytest.mark.asyncio
async def test_end_must_follow_start(client: AsyncClient, manager, employee):
    await login_as(client, manager)
    response = await client.post(
        "/api/shifts",
        json={
            "user_id": str(employee.id),
            "start_time": SHIFT_START.isoformat(),
            "end_time": SHIFT_START.isoformat(),
            "position": "Barista",
        },
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_employee_cannot_list_others(client: AsyncClient, db, employee, coworker):
    await make_shift(db, coworker, SHIFT_START, 8)
    await login_as(client, employee)

    response = await client.get("/api/shifts", params={"user_id": str(coworker.id)})
    assert response.status_code == 403
    assert (await client.get("/api/shifts")).json()["shifts"] == []


@pytest.mark.asyncio
async def test_clock_in_and_out(client: AsyncClient, db, manager, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8)
    await login_as(client, manager)

    early_out = await client.post(f"/api/shifts/{shift.id}/clock-out")
    assert early_out.status_code == 400

    clocked_in = await client.post(f"/api/shifts/{shift.id}/clock-in")
    assert clocked_in.status_code == 200
    assert clocked_in.json()["shift"]["status"] == "in-progress"
    assert clocked_in.json()["shift"]["actual_start_time"] is not None

    twice = await client.post(f"/api/shifts/{shift.id}/clock-in")
    assert twice.status_code == 400

    clocked_out = await client.post(f"/api/shifts/{shift.id}/clock-out")
    assert clocked_out.json()["shift"]["status"] == "completed"

    await login_as(client, employee)
    titles = [n["title"] for n in (await client.get("/api/notifications")).json()["notifications"]]
    assert len(titles) == 2


@pytest.mark.asyncio
async def test_shift_with_trade_cannot_be_deleted(client: AsyncClient, db, manager, employee):
    traded = await make_shift(db, employee, SHIFT_START, 8)
    plain = await make_shift(db, employee, SHIFT_START + timedelta(days=1), 8)

    await login_as(client, employee)
    await client.post("/api/shift-trades", json={"shift_id": str(traded.id), "reason": "Exam"})

    await login_as(client, manager)
    assert (await client.delete(f"/api/shifts/{traded.id}")).status_code == 400
    assert (await client.delete(f"/api/shifts/{plain.id}")).status_code == 200
    assert (await client.delete(f"/api/shifts/{plain.id}")).status_code == 404


@pytest.mark.asyncio
async def test_update_shift_position(client: AsyncClient, db, manager, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8)
    await login_as(client, manager)

    response = await client.put(f"/api/shifts/{shift.id}", json={"position": "Cashier"})
    assert response.status_code == 200
    assert response.json()["shift"]["position"] == "Cashier"


@pytest.mark.asyncio
async def test_reversed_actual_times_are_rejected(client: AsyncClient, db, manager, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8)
    await login_as(client, manager)

    both = await client.put(
        f"/api/shifts/{shift.id}",
        json={
            "actual_start_time": (SHIFT_START + timedelta(hours=10)).isoformat(),
            "actual_end_time": (SHIFT_START + timedelta(hours=2)).isoformat(),
        },
    )
    assert both.status_code == 400

    clocked = await client.put(
        f"/api/shifts/{shift.id}",
        json={
            "actual_start_time": SHIFT_START.isoformat(),
            "actual_end_time": (SHIFT_START + timedelta(hours=8)).isoformat(),
        },
    )
    assert clocked.status_code == 200

    # A lone end time before the stored start is rejected too
    end_only = await client.put(
        f"/api/shifts/{shift.id}",
        json={"actual_end_time": (SHIFT_START - timedelta(hours=1)).isoformat()},
    )
    assert end_only.status_code == 400
    assert end_only.json()["message"] == "actual_end_time must be after actual_start_time"

    cleared = await client.put(
        f"/api/shifts/{shift.id}",
        json={"actual_start_time": None, "actual_end_time": (SHIFT_START - timedelta(hours=1)).isoformat()},
    )
    assert cleared.status_code == 200
    assert cleared.json()["shift"]["actual_start_time"] is None
