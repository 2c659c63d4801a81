from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.approval import (
    ApprovalDecision,
    ApprovalResponse,
    ApprovalWithUserResponse,
    ApprovalEnvelope,
    ApprovalListResponse,
)
from cafeshift.schemas.common import UserSummary
from cafeshift.services.approval_service import list_pending_approvals, decide_approval

router = APIRouter()


@router.get("", response_model=ApprovalListResponse)
@handle_endpoint_errors(operation_name="list_approvals")
async def list_approvals_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Pending approvals requested by users of the manager's branch."""
    rows = await list_pending_approvals(db, current_user.branch_id)
    return ApprovalListResponse(
        approvals=[
            ApprovalWithUserResponse(
                **ApprovalResponse.model_validate(approval).model_dump(),
                requested_by_user=UserSummary.model_validate(user),
            )
            for approval, user in rows
        ]
    )


@router.put("/{approval_id}", response_model=ApprovalEnvelope)
@handle_endpoint_errors(operation_name="decide_approval")
async def decide_approval_endpoint(
    approval_id: str,
    data: ApprovalDecision,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject; the underlying request transitions with it."""
    approval = await decide_approval(
        db,
        parse_uuid(approval_id, "Approval ID"),
        current_user,
        approved=data.status == "approved",
        reason=data.reason,
    )
    return ApprovalEnvelope(approval=ApprovalResponse.model_validate(approval))
