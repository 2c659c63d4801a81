import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from cafeshift.models.branch import Branch
from cafeshift.models.payroll import PayrollEntry
from cafeshift.models.user import UserRole
from tests.conftest import login_as, make_shift, make_user

PERIOD_START = datetime(2026, 2, 2)


async def _processed_entry_ids(client: AsyncClient, db, manager, *employees):
    for employee in employees:
        await make_shift(db, employee, PERIOD_START + timedelta(hours=9), 8)
    await login_as(client, manager)
    period = await client.post(
        "/api/payroll/periods",
        json={
            "start_date": PERIOD_START.isoformat(),
            "end_date": (PERIOD_START + timedelta(days=14)).isoformat(),
        },
    )
    period_id = period.json()["period"]["id"]
    await client.post(f"/api/payroll/periods/{period_id}/process")
    entries = (await client.get("/api/payroll/entries/branch")).json()["entries"]
    return [e["id"] for e in entries]


@pytest.mark.asyncio
async def test_store_then_verify(client, db, manager, employee):
    [entry_id] = await _processed_entry_ids(client, db, manager, employee)

    stored = await client.post("/api/blockchain/payroll/store", json={"payroll_entry_id": entry_id})
    assert stored.status_code == 200, stored.text
    record = stored.json()["blockchain_record"]
    assert len(record["blockchain_hash"]) == 64
    assert record["block_number"] == 1

    verified = await client.post("/api/blockchain/payroll/verify", json={"payroll_entry_id": entry_id})
    verification = verified.json()["verification"]
    assert verification["is_valid"] is True
    assert verification["stored_hash"] == verification["computed_hash"]

    lookup = await client.get(f"/api/blockchain/record/{record['transaction_hash']}")
    assert lookup.json()["record"]["entry_id"] == entry_id


@pytest.mark.asyncio
async def test_tampered_entry_fails_verification(client, db, session_factory, manager, employee):
    [entry_id] = await _processed_entry_ids(client, db, manager, employee)
    await client.post("/api/blockchain/payroll/store", json={"payroll_entry_id": entry_id})

    async with session_factory() as session:
        entry = await session.get(PayrollEntry, uuid.UUID(entry_id))
        entry.net_pay = Decimal("9999")
        await session.commit()

    verified = await client.post("/api/blockchain/payroll/verify", json={"payroll_entry_id": entry_id})
    assert verified.json()["verification"]["is_valid"] is False


@pytest.mark.asyncio
async def test_verify_requires_stored_record(client, db, manager, employee):
    [entry_id] = await _processed_entry_ids(client, db, manager, employee)
    response = await client.post("/api/blockchain/payroll/verify", json={"payroll_entry_id": entry_id})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_batch_store_assigns_consecutive_blocks(client, db, manager, employee, coworker):
    entry_ids = await _processed_entry_ids(client, db, manager, employee, coworker)

    response = await client.post("/api/blockchain/payroll/batch-store", json={"payroll_entry_ids": entry_ids})
    assert response.status_code == 200
    data = response.json()
    assert data["stored_count"] == 2
    assert sorted(r["block_number"] for r in data["results"]) == [1, 2]


@pytest.mark.asyncio
async def test_other_branch_entries_are_invisible(client, db, manager, employee):
    [entry_id] = await _processed_entry_ids(client, db, manager, employee)

    other_branch = Branch(name="Uptown", address="9 High St", timezone="UTC")
    db.add(other_branch)
    await db.commit()
    other_manager = await make_user(db, other_branch, "uma", role=UserRole.MANAGER)

    await login_as(client, other_manager)
    response = await client.post("/api/blockchain/payroll/store", json={"payroll_entry_id": entry_id})
    assert response.status_code == 404
    batch = await client.post("/api/blockchain/payroll/batch-store", json={"payroll_entry_ids": [entry_id]})
    assert batch.status_code == 404


@pytest.mark.asyncio
async def test_employee_cannot_store(client, db, manager, employee):
    [entry_id] = await _processed_entry_ids(client, db, manager, employee)
    await login_as(client, employee)
    response = await client.post("/api/blockchain/payroll/store", json={"payroll_entry_id": entry_id})
    assert response.status_code == 403
