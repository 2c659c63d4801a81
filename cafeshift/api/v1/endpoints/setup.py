from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.error_handling import handle_endpoint_errors
from cafeshift.schemas.branch import BranchResponse
from cafeshift.schemas.setup import SetupRequest, SetupResponse, SetupStatusResponse, SetupManagerSummary
from cafeshift.services.setup_service import is_setup_complete, run_setup

router = APIRouter()


@router.get("/status", response_model=SetupStatusResponse)
@handle_endpoint_errors(operation_name="get_setup_status")
async def setup_status_endpoint(db: AsyncSession = Depends(get_db)):
    """Whether the first-run wizard has been completed. No authentication."""
    return SetupStatusResponse(is_setup_complete=await is_setup_complete(db))


@router.post("", response_model=SetupResponse)
@handle_endpoint_errors(operation_name="run_setup")
async def run_setup_endpoint(
    data: SetupRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create the first branch and manager. Only works once."""
    branch, manager = await run_setup(db, data)
    return SetupResponse(
        message="Setup completed successfully",
        branch=BranchResponse.model_validate(branch),
        manager=SetupManagerSummary.model_validate(manager),
    )
