from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.common import UserSummary
from cafeshift.schemas.shift import (
    ShiftResponse,
    ShiftTradeCreate,
    ShiftTradeDecision,
    ShiftTradeResponse,
    ShiftTradeDetailResponse,
    ShiftTradeEnvelope,
    ShiftTradeListResponse,
)
from cafeshift.services.shift_trade_service import (
    create_shift_trade,
    list_available_trades,
    list_my_trades,
    take_shift_trade,
    decide_shift_trade,
)

router = APIRouter()


def _detail(trade, shift, from_user) -> ShiftTradeDetailResponse:
    return ShiftTradeDetailResponse(
        **ShiftTradeResponse.model_validate(trade).model_dump(),
        shift=ShiftResponse.model_validate(shift),
        from_user=UserSummary.model_validate(from_user),
    )


@router.get("", response_model=ShiftTradeListResponse)
@handle_endpoint_errors(operation_name="list_my_trades")
async def list_my_trades_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Trades the caller offered or took."""
    rows = await list_my_trades(db, current_user.id)
    return ShiftTradeListResponse(trades=[_detail(*row) for row in rows])


@router.get("/available", response_model=ShiftTradeListResponse)
@handle_endpoint_errors(operation_name="list_available_trades")
async def list_available_trades_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pending trades in the caller's branch."""
    rows = await list_available_trades(db, current_user.branch_id)
    return ShiftTradeListResponse(trades=[_detail(*row) for row in rows])


@router.post("", response_model=ShiftTradeEnvelope, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_shift_trade")
async def create_shift_trade_endpoint(
    data: ShiftTradeCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    trade = await create_shift_trade(db, current_user, data)
    return ShiftTradeEnvelope(trade=ShiftTradeResponse.model_validate(trade))


@router.put("/{trade_id}/take", response_model=ShiftTradeEnvelope)
@handle_endpoint_errors(operation_name="take_shift_trade")
async def take_shift_trade_endpoint(
    trade_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    trade = await take_shift_trade(db, parse_uuid(trade_id, "Trade ID"), current_user)
    return ShiftTradeEnvelope(trade=ShiftTradeResponse.model_validate(trade))


@router.put("/{trade_id}/approve", response_model=ShiftTradeEnvelope)
@handle_endpoint_errors(operation_name="approve_shift_trade")
async def approve_shift_trade_endpoint(
    trade_id: str,
    data: Optional[ShiftTradeDecision] = None,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    trade = await decide_shift_trade(db, parse_uuid(trade_id, "Trade ID"), current_user, True, reason=data.notes if data else None)
    return ShiftTradeEnvelope(trade=ShiftTradeResponse.model_validate(trade))


@router.put("/{trade_id}/reject", response_model=ShiftTradeEnvelope)
@handle_endpoint_errors(operation_name="reject_shift_trade")
async def reject_shift_trade_endpoint(
    trade_id: str,
    data: Optional[ShiftTradeDecision] = None,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    trade = await decide_shift_trade(db, parse_uuid(trade_id, "Trade ID"), current_user, False, reason=data.notes if data else None)
    return ShiftTradeEnvelope(trade=ShiftTradeResponse.model_validate(trade))
