"""
Manager approval queue.

Time-off requests and taken shift trades each get an Approval row. Deciding
through the queue and deciding through the resource endpoint run the same
code path, so the approval row and the underlying request never disagree.
"""
from typing import Optional, List, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi import HTTPException, status
import logging

from cafeshift.core.query_builder import filter_by_status
from cafeshift.models.approval import Approval, ApprovalType, ApprovalStatus
from cafeshift.models.user import User

logger = logging.getLogger(__name__)


def create_approval(
    db: AsyncSession,
    type: ApprovalType,
    request_id: UUID,
    requested_by: UUID,
    request_data: Optional[dict] = None,
) -> Approval:
    """Stage a pending approval; committed with the request it tracks."""
    approval = Approval(
        type=type,
        request_id=request_id,
        requested_by=requested_by,
        status=ApprovalStatus.PENDING,
        request_data=request_data,
    )
    db.add(approval)
    return approval


async def get_pending_approval_for(
    db: AsyncSession,
    type: ApprovalType,
    request_id: UUID,
) -> Optional[Approval]:
    result = await db.execute(
        select(Approval).where(
            Approval.type == type,
            Approval.request_id == request_id,
            Approval.status == ApprovalStatus.PENDING,
        )
    )
    return result.scalars().first()


async def mark_linked_approval(
    db: AsyncSession,
    type: ApprovalType,
    request_id: UUID,
    approved: bool,
    manager_id: UUID,
    reason: Optional[str] = None,
) -> Optional[Approval]:
    """Resolve the pending approval tracking a request, if there is one. Does not commit."""
    approval = await get_pending_approval_for(db, type, request_id)
    if approval is None:
        return None
    approval.status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
    approval.approved_by = manager_id
    approval.responded_at = datetime.utcnow()
    if reason is not None:
        approval.reason = reason
    return approval


async def list_pending_approvals(
    db: AsyncSession,
    branch_id: UUID,
) -> List[Tuple[Approval, User]]:
    """Pending approvals requested by users of the branch, oldest first."""
    query = (
        select(Approval, User)
        .join(User, Approval.requested_by == User.id)
        .where(User.branch_id == branch_id)
    )
    query = filter_by_status(query, Approval, ApprovalStatus.PENDING)
    result = await db.execute(query.order_by(Approval.requested_at))
    return [(approval, user) for approval, user in result.all()]


async def get_branch_approval(db: AsyncSession, approval_id: UUID, branch_id: UUID) -> Approval:
    result = await db.execute(
        select(Approval)
        .join(User, Approval.requested_by == User.id)
        .where(Approval.id == approval_id, User.branch_id == branch_id)
    )
    approval = result.scalar_one_or_none()
    if not approval:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Approval not found",
        )
    return approval


async def decide_approval(
    db: AsyncSession,
    approval_id: UUID,
    manager: User,
    approved: bool,
    reason: Optional[str] = None,
) -> Approval:
    """Approve or reject an approval and apply the matching request transition."""
    from cafeshift.services.time_off_service import decide_time_off_request
    from cafeshift.services.shift_trade_service import decide_shift_trade

    approval = await get_branch_approval(db, approval_id, manager.branch_id)
    if approval.status != ApprovalStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Approval has already been {approval.status.value}",
        )

    if approval.type == ApprovalType.LEAVE_REQUEST:
        await decide_time_off_request(db, approval.request_id, manager, approved, reason=reason)
    elif approval.type == ApprovalType.SHIFT_TRADE:
        await decide_shift_trade(db, approval.request_id, manager, approved, reason=reason)
    else:
        await mark_linked_approval(db, approval.type, approval.request_id, approved, manager.id, reason)
        await db.commit()

    await db.refresh(approval)
    logger.info(f"Approval {approval.id} ({approval.type.value}) {approval.status.value} by {manager.id}")
    return approval
