from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from cafeshift.models.shift import ShiftStatus
from tests.conftest import login_as, make_shift


@pytest.mark.asyncio
async def test_dashboard_counts_today(client: AsyncClient, db, manager, employee, coworker):
    now = datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    late = await make_shift(db, employee, today, 1, ShiftStatus.IN_PROGRESS)
    late.actual_start_time = today + timedelta(minutes=30)
    await db.commit()
    await make_shift(db, coworker, today, 2, ShiftStatus.COMPLETED)

    await login_as(client, manager)
    stats = (await client.get("/api/dashboard/stats")).json()["stats"]
    assert stats["clocked_in"] == 1
    assert stats["late"] == 1
    assert stats["on_break"] == 0
    # 2 hours * 15/h * 3
    assert stats["revenue"] == 90

    statuses = {
        item["user"]["id"]: item["status"]
        for item in (await client.get("/api/dashboard/employee-status")).json()["employee_status"]
    }
    assert statuses[str(employee.id)] == "Clocked In"
    assert statuses[str(coworker.id)] == "Completed"
    assert statuses[str(manager.id)] == "Off Duty"


@pytest.mark.asyncio
async def test_monthly_reports(client: AsyncClient, db, manager, employee):
    month_start = datetime.utcnow().replace(day=1, hour=8, minute=0, second=0, microsecond=0)
    await make_shift(db, employee, month_start, 8, ShiftStatus.COMPLETED)
    await make_shift(db, employee, month_start + timedelta(hours=10), 4, ShiftStatus.MISSED)

    await login_as(client, manager)
    attendance = (await client.get("/api/reports/attendance")).json()
    assert attendance["total_hours"] == 12

    shifts = (await client.get("/api/reports/shifts")).json()
    assert shifts["total_shifts"] == 2
    assert shifts["completed_shifts"] == 1
    assert shifts["missed_shifts"] == 1

    employees = (await client.get("/api/reports/employees")).json()
    assert employees == {"active_count": 2, "total_count": 2, "inactive_count": 0}

    assert (await client.get("/api/reports/payroll")).json()["total_payroll"] == 0


@pytest.mark.asyncio
async def test_my_performance(client: AsyncClient, db, employee):
    month_start = datetime.utcnow().replace(day=1, hour=8, minute=0, second=0, microsecond=0)
    await make_shift(db, employee, month_start, 5, ShiftStatus.COMPLETED)
    await make_shift(db, employee, month_start + timedelta(hours=6), 5)

    await login_as(client, employee)
    data = (await client.get("/api/employee/performance")).json()
    assert len(data["monthly_data"]) == 6
    assert data["current_month"]["hours"] == 10
    assert data["current_month"]["completion_rate"] == 50.0


@pytest.mark.asyncio
async def test_reports_require_manager(client: AsyncClient, employee):
    await login_as(client, employee)
    assert (await client.get("/api/reports/payroll")).status_code == 403
