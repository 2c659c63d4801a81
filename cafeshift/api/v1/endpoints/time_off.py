from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager, is_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.time_off import TimeOffStatus
from cafeshift.models.user import User
from cafeshift.schemas.common import UserSummary
from cafeshift.schemas.time_off import (
    TimeOffRequestCreate,
    TimeOffRequestResponse,
    TimeOffRequestWithUserResponse,
    TimeOffRequestEnvelope,
    TimeOffRequestListResponse,
    TimeOffBalanceResponse,
)
from cafeshift.services.time_off_service import (
    create_time_off_request,
    list_time_off_requests,
    decide_time_off_request,
    get_time_off_balance,
)

router = APIRouter()


@router.get("/time-off-requests", response_model=TimeOffRequestListResponse)
@handle_endpoint_errors(operation_name="list_time_off_requests")
async def list_requests_endpoint(
    status_filter: Optional[TimeOffStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Managers see their branch's requests; employees see their own."""
    rows = await list_time_off_requests(db, current_user, is_manager(current_user), status_filter)
    return TimeOffRequestListResponse(
        requests=[
            TimeOffRequestWithUserResponse(
                **TimeOffRequestResponse.model_validate(request).model_dump(),
                user=UserSummary.model_validate(owner),
            )
            for request, owner in rows
        ]
    )


@router.post("/time-off-requests", response_model=TimeOffRequestEnvelope, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_time_off_request")
async def create_request_endpoint(
    data: TimeOffRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    request = await create_time_off_request(db, current_user, data)
    return TimeOffRequestEnvelope(request=TimeOffRequestResponse.model_validate(request))


@router.put("/time-off-requests/{request_id}/approve", response_model=TimeOffRequestEnvelope)
@handle_endpoint_errors(operation_name="approve_time_off_request")
async def approve_request_endpoint(
    request_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    request = await decide_time_off_request(db, parse_uuid(request_id, "Request ID"), current_user, True)
    return TimeOffRequestEnvelope(request=TimeOffRequestResponse.model_validate(request))


@router.put("/time-off-requests/{request_id}/reject", response_model=TimeOffRequestEnvelope)
@handle_endpoint_errors(operation_name="reject_time_off_request")
async def reject_request_endpoint(
    request_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    request = await decide_time_off_request(db, parse_uuid(request_id, "Request ID"), current_user, False)
    return TimeOffRequestEnvelope(request=TimeOffRequestResponse.model_validate(request))


@router.get("/time-off-balance", response_model=TimeOffBalanceResponse)
@handle_endpoint_errors(operation_name="get_time_off_balance")
async def balance_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_time_off_balance(db, current_user)
