from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from tests.conftest import login_as, make_shift

NEW_EMPLOYEE = {
    "username": "nina",
    "password": "secret123",
    "first_name": "Nina",
    "last_name": "New",
    "email": "nina@example.com",
    "position": "Cashier",
    "hourly_rate": "14.50",
}


@pytest.mark.asyncio
async def test_create_employee_sets_record_hash(client: AsyncClient, manager):
    await login_as(client, manager)
    response = await client.post("/api/employees", json=NEW_EMPLOYEE)
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["branch_id"] == str(manager.branch_id)
    assert len(created["blockchain_hash"]) == 64

    duplicate = await client.post("/api/employees", json=NEW_EMPLOYEE)
    assert duplicate.status_code == 400

    renamed = await client.put(f"/api/employees/{created['id']}", json={"last_name": "Renamed"})
    assert renamed.json()["blockchain_hash"] != created["blockchain_hash"]


@pytest.mark.asyncio
async def test_bulk_deactivate_blocks_login(client: AsyncClient, manager, employee):
    await login_as(client, manager)
    response = await client.post("/api/employees/bulk-deactivate", json={"employee_ids": [str(employee.id)]})
    assert response.json()["updated_count"] == 1

    login = await client.post("/api/auth/login", json={"username": employee.username, "password": "Test123!"})
    assert login.status_code == 401


@pytest.mark.asyncio
async def test_employee_endpoints_require_manager(client: AsyncClient, employee):
    await login_as(client, employee)
    assert (await client.get("/api/employees")).status_code == 403


@pytest.mark.asyncio
async def test_hours_report_totals(client: AsyncClient, db, manager, employee):
    start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=2)
    await make_shift(db, employee, start + timedelta(hours=8), 6)
    await make_shift(db, employee, start + timedelta(days=1, hours=8), 4)

    await login_as(client, manager)
    report = (await client.get("/api/hours/report")).json()
    assert report["summary"]["total_hours"] == 10
    assert report["summary"]["total_shifts"] == 2
    rows = {row["employee_id"]: row for row in report["employees"]}
    assert rows[str(employee.id)]["estimated_pay"] == 150
    assert rows[str(manager.id)]["total_shifts"] == 0
