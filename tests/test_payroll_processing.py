import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from cafeshift.models.branch import Branch
from cafeshift.models.notification import Notification
from cafeshift.models.payroll import PayrollEntry, PayrollPeriod, PayrollPeriodStatus
from cafeshift.models.shift import ShiftStatus
from cafeshift.models.user import UserRole
from tests.conftest import login_as, make_shift, make_user

PERIOD_START = datetime(2026, 1, 5)


async def _create_period(client: AsyncClient, days: int = 7) -> str:
    response = await client.post(
        "/api/payroll/periods",
        json={
            "start_date": PERIOD_START.isoformat(),
            "end_date": (PERIOD_START + timedelta(days=days)).isoformat(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["period"]["id"]


async def _count_entries(db) -> int:
    return (await db.execute(select(func.count()).select_from(PayrollEntry))).scalar()


@pytest.mark.asyncio
async def test_process_creates_entries_with_overtime(client, db, manager, employee):
    for day in range(5):
        await make_shift(db, employee, PERIOD_START + timedelta(days=day, hours=8), 9, ShiftStatus.COMPLETED)

    await login_as(client, manager)
    period_id = await _create_period(client)

    response = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["entries_created"] == 1
    assert Decimal(data["total_hours"]) == Decimal(45)
    assert Decimal(data["total_pay"]) == Decimal("712.5")

    entries = await client.get("/api/payroll/entries/branch", params={"period_id": period_id})
    entry = entries.json()["entries"][0]
    assert entry["employee"]["id"] == str(employee.id)
    assert Decimal(entry["regular_hours"]) == Decimal(40)
    assert Decimal(entry["overtime_hours"]) == Decimal(5)
    assert Decimal(entry["net_pay"]) == Decimal("605.625")
    assert entry["status"] == "pending"

    notified = await db.execute(select(Notification).where(Notification.user_id == employee.id))
    assert notified.scalars().first().title == "Payroll Slip Available"


@pytest.mark.asyncio
async def test_users_without_shifts_get_no_entry(client, db, manager, employee, coworker):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)

    await login_as(client, manager)
    period_id = await _create_period(client)
    response = await client.post(f"/api/payroll/periods/{period_id}/process")

    assert response.json()["entries_created"] == 1
    assert await _count_entries(db) == 1


@pytest.mark.asyncio
async def test_second_run_is_rejected_without_duplicates(client, db, manager, employee):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)

    await login_as(client, manager)
    period_id = await _create_period(client)

    first = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert first.status_code == 200

    second = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert second.status_code == 400
    assert second.json()["message"] == "Payroll period is not open"
    assert await _count_entries(db) == 1


@pytest.mark.asyncio
async def test_failed_run_rolls_back_and_leaves_period_open(client, db, manager, employee):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)

    await login_as(client, manager)
    period_id = await _create_period(client)

    with patch(
        "cafeshift.services.payroll_service.create_notification",
        side_effect=RuntimeError("notification store down"),
    ):
        response = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert response.status_code == 500

    assert await _count_entries(db) == 0
    period = (await db.execute(select(PayrollPeriod))).scalar_one()
    assert period.status == PayrollPeriodStatus.OPEN

    retry = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert retry.status_code == 200
    assert retry.json()["entries_created"] == 1


@pytest.mark.asyncio
async def test_entry_lifecycle_marks_period_paid(client, db, manager, employee):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)

    await login_as(client, manager)
    period_id = await _create_period(client)
    await client.post(f"/api/payroll/periods/{period_id}/process")
    entry_id = (await client.get("/api/payroll/entries/branch")).json()["entries"][0]["id"]

    early = await client.put(f"/api/payroll/entries/{entry_id}/paid")
    assert early.status_code == 400

    approved = await client.put(f"/api/payroll/entries/{entry_id}/approve")
    assert approved.json()["entry"]["status"] == "approved"

    paid = await client.put(f"/api/payroll/entries/{entry_id}/paid")
    assert paid.json()["entry"]["status"] == "paid"

    periods = (await client.get("/api/payroll/periods")).json()["periods"]
    assert periods[0]["status"] == "paid"


@pytest.mark.asyncio
async def test_employee_sees_only_own_payslip(client, db, manager, employee, coworker):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)
    await make_shift(db, coworker, PERIOD_START + timedelta(hours=8), 6)

    await login_as(client, manager)
    period_id = await _create_period(client)
    await client.post(f"/api/payroll/periods/{period_id}/process")
    entries = (await client.get("/api/payroll/entries/branch")).json()["entries"]
    by_user = {e["user_id"]: e["id"] for e in entries}

    await login_as(client, employee)
    own = await client.get(f"/api/payroll/payslip/{by_user[str(employee.id)]}")
    assert own.status_code == 200
    assert Decimal(own.json()["payslip"]["total_hours"]) == Decimal(8)

    other = await client.get(f"/api/payroll/payslip/{by_user[str(coworker.id)]}")
    assert other.status_code == 404

    pdf = await client.get(f"/api/payroll/payslip/{by_user[str(employee.id)]}/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content[:4] == b"%PDF"


@pytest.mark.asyncio
async def test_employee_cannot_process_payroll(client, manager, employee):
    await login_as(client, manager)
    period_id = await _create_period(client)

    await login_as(client, employee)
    response = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_malformed_period_id_is_bad_request(client, manager):
    await login_as(client, manager)
    response = await client.post("/api/payroll/periods/not-a-uuid/process")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_one_week_three_shift_period(client, db, manager, employee):
    for day in range(3):
        await make_shift(db, employee, PERIOD_START + timedelta(days=day, hours=8), 8, ShiftStatus.COMPLETED)

    await login_as(client, manager)
    period_id = await _create_period(client, days=7)
    response = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert response.status_code == 200
    assert Decimal(response.json()["total_pay"]) == Decimal(360)

    entry = (await client.get("/api/payroll/entries/branch")).json()["entries"][0]
    assert Decimal(entry["regular_hours"]) == Decimal(24)
    assert Decimal(entry["overtime_hours"]) == Decimal(0)
    assert Decimal(entry["gross_pay"]) == Decimal(360)
    assert Decimal(entry["deductions"]) == Decimal(54)
    assert Decimal(entry["net_pay"]) == Decimal(306)


@pytest.mark.asyncio
async def test_inactive_employee_with_shifts_is_skipped(client, db, branch, manager, employee):
    former = await make_user(db, branch, "fern", is_active=False)
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)
    await make_shift(db, former, PERIOD_START + timedelta(hours=8), 8)

    await login_as(client, manager)
    period_id = await _create_period(client)
    response = await client.post(f"/api/payroll/periods/{period_id}/process")

    assert response.json()["entries_created"] == 1
    users = (await db.execute(select(PayrollEntry.user_id))).scalars().all()
    assert users == [employee.id]


@pytest.mark.asyncio
async def test_period_bounds_are_inclusive(client, db, manager, employee):
    period_end = PERIOD_START + timedelta(days=7)
    await make_shift(db, employee, PERIOD_START, 4)
    await make_shift(db, employee, period_end, 2)
    await make_shift(db, employee, period_end + timedelta(seconds=1), 8)
    await make_shift(db, employee, PERIOD_START - timedelta(seconds=1), 8)

    await login_as(client, manager)
    period_id = await _create_period(client, days=7)
    response = await client.post(f"/api/payroll/periods/{period_id}/process")

    assert Decimal(response.json()["total_hours"]) == Decimal(6)


@pytest.mark.asyncio
async def test_period_of_another_branch_is_not_found(client, db, manager, employee):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)
    await login_as(client, manager)
    period_id = await _create_period(client)

    uptown = Branch(id=uuid.uuid4(), name="Uptown Cafe", address="9 High St", timezone="UTC")
    db.add(uptown)
    await db.commit()
    outsider = await make_user(db, uptown, "ursula", role=UserRole.MANAGER)

    await login_as(client, outsider)
    response = await client.post(f"/api/payroll/periods/{period_id}/process")
    assert response.status_code == 404

    assert await _count_entries(db) == 0
    period = (await db.execute(select(PayrollPeriod))).scalar_one()
    assert period.status == PayrollPeriodStatus.OPEN


@pytest.mark.asyncio
async def test_send_payslip_notifies_without_changing_status(client, db, manager, employee):
    await make_shift(db, employee, PERIOD_START + timedelta(hours=8), 8)

    await login_as(client, manager)
    period_id = await _create_period(client)
    await client.post(f"/api/payroll/periods/{period_id}/process")
    entry_id = (await client.get("/api/payroll/entries/branch")).json()["entries"][0]["id"]

    response = await client.post(f"/api/payroll/entries/{entry_id}/send")
    assert response.status_code == 200

    titles = (
        await db.execute(
            select(Notification.title)
            .where(Notification.user_id == employee.id)
            .order_by(Notification.created_at)
        )
    ).scalars().all()
    assert "Payslip Sent" in titles

    entry = (await client.get("/api/payroll/entries/branch")).json()["entries"][0]
    assert entry["status"] == "pending"
