from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.user import (
    EmployeeCreate,
    EmployeeUpdate,
    UserResponse,
    EmployeeListResponse,
    BulkEmployeeRequest,
    BulkUpdateResponse,
    EmployeeStatsResponse,
    EmployeePerformanceResponse,
)
from cafeshift.services.user_service import (
    list_employees,
    get_employee,
    create_employee,
    update_employee,
    bulk_set_active,
    get_employee_stats,
    get_employee_performance,
)

router = APIRouter()


@router.get("", response_model=EmployeeListResponse)
@handle_endpoint_errors(operation_name="list_employees")
async def list_employees_endpoint(
    is_active: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """List users of the manager's branch."""
    employees, total = await list_employees(db, current_user.branch_id, is_active, skip, limit)
    return EmployeeListResponse(
        employees=[UserResponse.model_validate(e) for e in employees],
        total=total,
    )


@router.get("/stats", response_model=EmployeeStatsResponse)
@handle_endpoint_errors(operation_name="get_employee_stats")
async def employee_stats_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_employee_stats(db, current_user.branch_id)


@router.get("/performance", response_model=List[EmployeePerformanceResponse])
@handle_endpoint_errors(operation_name="get_employee_performance")
async def employee_performance_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_employee_performance(db, current_user.branch_id)


@router.post("/bulk-activate", response_model=BulkUpdateResponse)
@handle_endpoint_errors(operation_name="bulk_activate_employees")
async def bulk_activate_endpoint(
    data: BulkEmployeeRequest,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    updated = await bulk_set_active(db, current_user.branch_id, data.employee_ids, True)
    return BulkUpdateResponse(
        message=f"{updated} employees activated successfully",
        updated_count=updated,
    )


@router.post("/bulk-deactivate", response_model=BulkUpdateResponse)
@handle_endpoint_errors(operation_name="bulk_deactivate_employees")
async def bulk_deactivate_endpoint(
    data: BulkEmployeeRequest,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    updated = await bulk_set_active(db, current_user.branch_id, data.employee_ids, False)
    return BulkUpdateResponse(
        message=f"{updated} employees deactivated successfully",
        updated_count=updated,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_employee")
async def create_employee_endpoint(
    data: EmployeeCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await create_employee(db, current_user.branch_id, data)


@router.get("/{employee_id}", response_model=UserResponse)
@handle_endpoint_errors(operation_name="get_employee")
async def get_employee_endpoint(
    employee_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_employee(db, parse_uuid(employee_id, "Employee ID"), current_user.branch_id)


@router.put("/{employee_id}", response_model=UserResponse)
@handle_endpoint_errors(operation_name="update_employee")
async def update_employee_endpoint(
    employee_id: str,
    data: EmployeeUpdate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await update_employee(db, parse_uuid(employee_id, "Employee ID"), current_user.branch_id, data)
