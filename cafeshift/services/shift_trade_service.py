"""
Shift trading: an employee offers a shift, a colleague takes it, a manager
approves the handover.
"""
from typing import Optional, List, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fastapi import HTTPException, status
import logging

from cafeshift.core.dependencies import MANAGER_ROLES
from cafeshift.models.approval import ApprovalType
from cafeshift.models.notification import NotificationType
from cafeshift.models.shift import Shift, ShiftStatus, ShiftTrade, ShiftTradeStatus
from cafeshift.models.user import User
from cafeshift.schemas.shift import ShiftTradeCreate
from cafeshift.services.approval_service import create_approval, get_pending_approval_for, mark_linked_approval
from cafeshift.services.notification_service import create_notification

logger = logging.getLogger(__name__)


async def create_shift_trade(
    db: AsyncSession,
    user: User,
    data: ShiftTradeCreate,
) -> ShiftTrade:
    """Offer one of the caller's own scheduled shifts."""
    result = await db.execute(
        select(Shift).where(Shift.id == data.shift_id, Shift.user_id == user.id)
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shift not found",
        )
    if shift.status != ShiftStatus.SCHEDULED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only scheduled shifts can be traded",
        )

    open_trade = await db.execute(
        select(ShiftTrade).where(
            ShiftTrade.shift_id == shift.id,
            ShiftTrade.status == ShiftTradeStatus.PENDING,
        )
    )
    if open_trade.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This shift already has a pending trade",
        )

    if data.to_user_id:
        if data.to_user_id == user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot offer a shift to yourself",
            )
        target = await db.execute(
            select(User).where(
                User.id == data.to_user_id,
                User.branch_id == user.branch_id,
                User.is_active == True,
            )
        )
        if not target.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Target colleague not found in your branch",
            )

    trade = ShiftTrade(
        shift_id=shift.id,
        from_user_id=user.id,
        to_user_id=data.to_user_id,
        reason=data.reason,
        urgency=data.urgency,
        notes=data.notes,
        status=ShiftTradeStatus.PENDING,
    )
    db.add(trade)
    await db.commit()
    await db.refresh(trade)
    logger.info(f"Shift trade {trade.id} offered by {user.id} for shift {shift.id}")
    return trade


def _with_details_query():
    return (
        select(ShiftTrade, Shift, User)
        .join(Shift, ShiftTrade.shift_id == Shift.id)
        .join(User, ShiftTrade.from_user_id == User.id)
    )


async def list_available_trades(
    db: AsyncSession,
    branch_id: UUID,
) -> List[Tuple[ShiftTrade, Shift, User]]:
    """Pending trades for shifts of the branch."""
    result = await db.execute(
        _with_details_query()
        .where(
            ShiftTrade.status == ShiftTradeStatus.PENDING,
            Shift.branch_id == branch_id,
        )
        .order_by(Shift.start_time)
    )
    return [tuple(row) for row in result.all()]


async def list_my_trades(
    db: AsyncSession,
    user_id: UUID,
) -> List[Tuple[ShiftTrade, Shift, User]]:
    """Trades the user offered or took."""
    result = await db.execute(
        _with_details_query()
        .where(or_(ShiftTrade.from_user_id == user_id, ShiftTrade.to_user_id == user_id))
        .order_by(ShiftTrade.requested_at.desc())
    )
    return [tuple(row) for row in result.all()]


async def _get_branch_trade(db: AsyncSession, trade_id: UUID, branch_id: UUID) -> Tuple[ShiftTrade, Shift]:
    result = await db.execute(
        select(ShiftTrade, Shift)
        .join(Shift, ShiftTrade.shift_id == Shift.id)
        .where(ShiftTrade.id == trade_id, Shift.branch_id == branch_id)
    )
    row = result.first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trade not found",
        )
    return row[0], row[1]


async def take_shift_trade(
    db: AsyncSession,
    trade_id: UUID,
    user: User,
) -> ShiftTrade:
    """
    Take a pending trade. The trade stays pending; an approval is queued
    for the branch managers.
    """
    trade, shift = await _get_branch_trade(db, trade_id, user.branch_id)

    if trade.status != ShiftTradeStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Trade is already {trade.status.value}",
        )
    if trade.from_user_id == user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot take your own shift",
        )
    # A taken trade carries its taker in to_user_id, so check for that first
    if await get_pending_approval_for(db, ApprovalType.SHIFT_TRADE, trade.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Trade has already been taken and is awaiting approval",
        )
    if trade.to_user_id and trade.to_user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This trade is offered to another colleague",
        )

    trade.to_user_id = user.id

    create_approval(
        db,
        type=ApprovalType.SHIFT_TRADE,
        request_id=trade.id,
        requested_by=trade.from_user_id,
        request_data={
            "shift_id": str(shift.id),
            "from_user_id": str(trade.from_user_id),
            "to_user_id": str(user.id),
            "start_time": shift.start_time.isoformat(),
            "end_time": shift.end_time.isoformat(),
            "reason": trade.reason,
            "urgency": trade.urgency.value,
        },
    )

    managers = await db.execute(
        select(User).where(
            User.branch_id == user.branch_id,
            User.role.in_(MANAGER_ROLES),
            User.is_active == True,
        )
    )
    for manager in managers.scalars().all():
        create_notification(
            db,
            user_id=manager.id,
            type=NotificationType.SCHEDULE,
            title="Shift Trade Awaiting Approval",
            message=f"{user.full_name} wants to take a {shift.position} shift",
            data={"trade_id": str(trade.id), "shift_id": str(shift.id)},
        )

    await db.commit()
    await db.refresh(trade)
    return trade


async def decide_shift_trade(
    db: AsyncSession,
    trade_id: UUID,
    manager: User,
    approved: bool,
    reason: Optional[str] = None,
) -> ShiftTrade:
    """Approve (reassigning the shift to the taker) or reject a pending trade."""
    trade, shift = await _get_branch_trade(db, trade_id, manager.branch_id)

    if trade.status != ShiftTradeStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Trade is already {trade.status.value}",
        )
    if approved and not trade.to_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Trade has not been taken by anyone yet",
        )

    now = datetime.utcnow()
    trade.status = ShiftTradeStatus.APPROVED if approved else ShiftTradeStatus.REJECTED
    trade.approved_by = manager.id
    trade.approved_at = now
    if reason:
        trade.notes = reason
    if approved:
        shift.user_id = trade.to_user_id

    await mark_linked_approval(db, ApprovalType.SHIFT_TRADE, trade.id, approved, manager.id, reason)

    outcome = "approved" if approved else "rejected"
    recipients = [trade.from_user_id] + ([trade.to_user_id] if trade.to_user_id else [])
    for recipient in recipients:
        create_notification(
            db,
            user_id=recipient,
            type=NotificationType.SCHEDULE,
            title=f"Shift Trade {outcome.capitalize()}",
            message=f"The shift trade for the {shift.position} shift has been {outcome}",
            data={"trade_id": str(trade.id), "shift_id": str(shift.id), "status": outcome},
        )

    await db.commit()
    await db.refresh(trade)
    logger.info(f"Shift trade {trade.id} {outcome} by {manager.id}")
    return trade
