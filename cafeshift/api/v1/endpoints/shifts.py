from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager, is_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.common import UTCDateTime, UserSummary, MessageResponse
from cafeshift.schemas.shift import (
    ShiftCreate,
    ShiftUpdate,
    ShiftResponse,
    ShiftWithUserResponse,
    ShiftListResponse,
    ShiftEnvelope,
    ClockActionResponse,
)
from cafeshift.services.shift_service import (
    list_user_shifts,
    list_branch_shifts,
    create_shift,
    update_shift,
    delete_shift,
    clock_in,
    clock_out,
)
from cafeshift.services.user_service import get_user_by_id

router = APIRouter()


def _shift_with_user(shift, user: Optional[User]) -> ShiftWithUserResponse:
    return ShiftWithUserResponse(
        **ShiftResponse.model_validate(shift).model_dump(),
        user=UserSummary.model_validate(user) if user else None,
    )


@router.get("", response_model=ShiftListResponse)
@handle_endpoint_errors(operation_name="list_shifts")
async def list_shifts_endpoint(
    start_date: Optional[UTCDateTime] = Query(None),
    end_date: Optional[UTCDateTime] = Query(None),
    user_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List the caller's shifts. Managers may pass user_id to list the shifts
    of another user in their branch.
    """
    target = current_user
    if user_id:
        target_id = parse_uuid(user_id, "User ID")
        if target_id != current_user.id:
            if not is_manager(current_user):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Insufficient permissions",
                )
            target = await get_user_by_id(db, target_id, current_user.branch_id)
            if not target:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found",
                )

    shifts = await list_user_shifts(db, target.id, start_date, end_date)
    return ShiftListResponse(shifts=[_shift_with_user(s, target) for s in shifts])


@router.get("/branch", response_model=ShiftListResponse)
@handle_endpoint_errors(operation_name="list_branch_shifts")
async def list_branch_shifts_endpoint(
    start_date: Optional[UTCDateTime] = Query(None),
    end_date: Optional[UTCDateTime] = Query(None),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Shifts of active employees in the manager's branch."""
    rows = await list_branch_shifts(db, current_user.branch_id, start_date, end_date)
    return ShiftListResponse(shifts=[_shift_with_user(s, u) for s, u in rows])


@router.post("", response_model=ShiftEnvelope, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_shift")
async def create_shift_endpoint(
    data: ShiftCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    shift = await create_shift(db, current_user.branch_id, data)
    return ShiftEnvelope(shift=ShiftResponse.model_validate(shift))


@router.put("/{shift_id}", response_model=ShiftEnvelope)
@handle_endpoint_errors(operation_name="update_shift")
async def update_shift_endpoint(
    shift_id: str,
    data: ShiftUpdate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    shift = await update_shift(db, parse_uuid(shift_id, "Shift ID"), current_user.branch_id, data)
    return ShiftEnvelope(shift=ShiftResponse.model_validate(shift))


@router.delete("/{shift_id}", response_model=MessageResponse)
@handle_endpoint_errors(operation_name="delete_shift")
async def delete_shift_endpoint(
    shift_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    await delete_shift(db, parse_uuid(shift_id, "Shift ID"), current_user.branch_id)
    return MessageResponse(message="Shift deleted successfully")


@router.post("/{shift_id}/clock-in", response_model=ClockActionResponse)
@handle_endpoint_errors(operation_name="clock_in")
async def clock_in_endpoint(
    shift_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Manager clocks an employee in."""
    shift = await clock_in(db, parse_uuid(shift_id, "Shift ID"), current_user.branch_id)
    return ClockActionResponse(
        message="Employee clocked in successfully",
        shift=ShiftResponse.model_validate(shift),
    )


@router.post("/{shift_id}/clock-out", response_model=ClockActionResponse)
@handle_endpoint_errors(operation_name="clock_out")
async def clock_out_endpoint(
    shift_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Manager clocks an employee out."""
    shift = await clock_out(db, parse_uuid(shift_id, "Shift ID"), current_user.branch_id)
    return ClockActionResponse(
        message="Employee clocked out successfully",
        shift=ShiftResponse.model_validate(shift),
    )
