import uuid
from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from cafeshift.models.approval import Approval, ApprovalStatus, ApprovalType
from cafeshift.models.shift import Shift, ShiftStatus, ShiftTrade, ShiftTradeStatus
from tests.conftest import login_as, make_shift, make_user

SHIFT_START = datetime(2026, 3, 2, 7)


async def _offer(client: AsyncClient, shift, **extra):
    payload = {"shift_id": str(shift.id), "reason": "Family event", **extra}
    return await client.post("/api/shift-trades", json=payload)


@pytest.mark.asyncio
async def test_trade_flow_reassigns_shift(client, db, session_factory, manager, employee, coworker):
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    offered = await _offer(client, shift, urgency="urgent")
    assert offered.status_code == 201, offered.text
    trade_id = offered.json()["trade"]["id"]

    await login_as(client, coworker)
    available = (await client.get("/api/shift-trades/available")).json()["trades"]
    assert [t["id"] for t in available] == [trade_id]
    assert available[0]["from_user"]["id"] == str(employee.id)

    taken = await client.put(f"/api/shift-trades/{trade_id}/take")
    assert taken.status_code == 200
    assert taken.json()["trade"]["to_user_id"] == str(coworker.id)
    assert taken.json()["trade"]["status"] == "pending"

    await login_as(client, manager)
    approved = await client.put(f"/api/shift-trades/{trade_id}/approve", json={"notes": "ok"})
    assert approved.status_code == 200
    assert approved.json()["trade"]["status"] == "approved"

    async with session_factory() as fresh:
        reassigned = await fresh.get(Shift, shift.id)
        assert reassigned.user_id == coworker.id
        approvals = (
            await fresh.execute(select(Approval).where(Approval.request_id == uuid.UUID(trade_id)))
        ).scalars().all()
    assert [a.type for a in approvals] == [ApprovalType.SHIFT_TRADE]
    assert approvals[0].status == ApprovalStatus.APPROVED


@pytest.mark.asyncio
async def test_cannot_offer_someone_elses_shift(client, db, employee, coworker):
    shift = await make_shift(db, coworker, SHIFT_START, 8)

    await login_as(client, employee)
    response = await _offer(client, shift)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_scheduled_shifts_can_be_offered(client, db, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8, ShiftStatus.COMPLETED)

    await login_as(client, employee)
    response = await _offer(client, shift)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_pending_offer_rejected(client, db, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    assert (await _offer(client, shift)).status_code == 201
    duplicate = await _offer(client, shift)
    assert duplicate.status_code == 400


@pytest.mark.asyncio
async def test_cannot_take_own_trade(client, db, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    trade_id = (await _offer(client, shift)).json()["trade"]["id"]
    response = await client.put(f"/api/shift-trades/{trade_id}/take")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_targeted_trade_only_for_target(client, db, branch, employee, coworker):
    outsider = await make_user(db, branch, "olga")
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    trade_id = (await _offer(client, shift, to_user_id=str(coworker.id))).json()["trade"]["id"]

    await login_as(client, outsider)
    response = await client.put(f"/api/shift-trades/{trade_id}/take")
    assert response.status_code == 403

    await login_as(client, coworker)
    assert (await client.put(f"/api/shift-trades/{trade_id}/take")).status_code == 200


@pytest.mark.asyncio
async def test_second_taker_is_rejected(client, db, branch, employee, coworker):
    other = await make_user(db, branch, "otto")
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    trade_id = (await _offer(client, shift)).json()["trade"]["id"]

    await login_as(client, coworker)
    assert (await client.put(f"/api/shift-trades/{trade_id}/take")).status_code == 200

    await login_as(client, other)
    response = await client.put(f"/api/shift-trades/{trade_id}/take")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_taken_trade_reports_awaiting_approval(client, db, branch, employee, coworker):
    other = await make_user(db, branch, "otto")
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    trade_id = (await _offer(client, shift, to_user_id=str(coworker.id))).json()["trade"]["id"]

    await login_as(client, coworker)
    assert (await client.put(f"/api/shift-trades/{trade_id}/take")).status_code == 200

    await login_as(client, other)
    response = await client.put(f"/api/shift-trades/{trade_id}/take")
    assert response.status_code == 400
    assert response.json()["message"] == "Trade has already been taken and is awaiting approval"


@pytest.mark.asyncio
async def test_untaken_trade_cannot_be_approved(client, db, manager, employee):
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    trade_id = (await _offer(client, shift)).json()["trade"]["id"]

    await login_as(client, manager)
    response = await client.put(f"/api/shift-trades/{trade_id}/approve")
    assert response.status_code == 400

    rejected = await client.put(f"/api/shift-trades/{trade_id}/reject")
    assert rejected.json()["trade"]["status"] == "rejected"


@pytest.mark.asyncio
async def test_approval_queue_decides_trade(client, db, session_factory, manager, employee, coworker):
    shift = await make_shift(db, employee, SHIFT_START, 8)

    await login_as(client, employee)
    trade_id = (await _offer(client, shift)).json()["trade"]["id"]
    await login_as(client, coworker)
    await client.put(f"/api/shift-trades/{trade_id}/take")

    await login_as(client, manager)
    approvals = (await client.get("/api/approvals")).json()["approvals"]
    assert len(approvals) == 1
    assert approvals[0]["type"] == "shift_trade"
    assert approvals[0]["requested_by_user"]["id"] == str(employee.id)

    decided = await client.put(f"/api/approvals/{approvals[0]['id']}", json={"status": "approved"})
    assert decided.status_code == 200
    assert decided.json()["approval"]["status"] == "approved"

    async with session_factory() as fresh:
        assert (await fresh.get(Shift, shift.id)).user_id == coworker.id
        trade = await fresh.get(ShiftTrade, uuid.UUID(trade_id))
        assert trade.status == ShiftTradeStatus.APPROVED

    again = await client.put(f"/api/approvals/{approvals[0]['id']}", json={"status": "rejected"})
    assert again.status_code == 400
