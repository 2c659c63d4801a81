from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.branch import BranchCreate, BranchUpdate, BranchResponse, BranchListResponse
from cafeshift.services.branch_service import list_branches, get_branch, create_branch, update_branch

router = APIRouter()


@router.get("", response_model=BranchListResponse)
@handle_endpoint_errors(operation_name="list_branches")
async def list_branches_endpoint(
    include_inactive: bool = Query(True),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    branches = await list_branches(db, include_inactive=include_inactive)
    return BranchListResponse(branches=[BranchResponse.model_validate(b) for b in branches])


@router.get("/{branch_id}", response_model=BranchResponse)
@handle_endpoint_errors(operation_name="get_branch")
async def get_branch_endpoint(
    branch_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_branch(db, parse_uuid(branch_id, "Branch ID"))


@router.post("", response_model=BranchResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_branch")
async def create_branch_endpoint(
    data: BranchCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await create_branch(db, data)


@router.put("/{branch_id}", response_model=BranchResponse)
@handle_endpoint_errors(operation_name="update_branch")
async def update_branch_endpoint(
    branch_id: str,
    data: BranchUpdate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await update_branch(db, parse_uuid(branch_id, "Branch ID"), data)
