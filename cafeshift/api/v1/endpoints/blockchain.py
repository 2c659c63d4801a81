from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors
from cafeshift.models.user import User
from cafeshift.schemas.blockchain import (
    StoreRecordRequest,
    BatchStoreRequest,
    StoreRecordResponse,
    BatchStoreResponse,
    VerifyResponse,
    RecordLookupResponse,
)
from cafeshift.services.blockchain_service import (
    store_payroll_record,
    batch_store_payroll_records,
    verify_payroll_record,
    get_record_by_transaction_hash,
)

router = APIRouter()


@router.post("/payroll/store", response_model=StoreRecordResponse)
@handle_endpoint_errors(operation_name="store_payroll_record")
async def store_endpoint(
    data: StoreRecordRequest,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    record = await store_payroll_record(db, data.payroll_entry_id, current_user.branch_id)
    return StoreRecordResponse(
        message="Payroll record stored on blockchain successfully",
        blockchain_record=record,
    )


@router.post("/payroll/batch-store", response_model=BatchStoreResponse)
@handle_endpoint_errors(operation_name="batch_store_payroll_records")
async def batch_store_endpoint(
    data: BatchStoreRequest,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    records = await batch_store_payroll_records(db, data.payroll_entry_ids, current_user.branch_id)
    return BatchStoreResponse(
        message=f"{len(records)} payroll records stored on blockchain successfully",
        stored_count=len(records),
        results=records,
    )


@router.post("/payroll/verify", response_model=VerifyResponse)
@handle_endpoint_errors(operation_name="verify_payroll_record")
async def verify_endpoint(
    data: StoreRecordRequest,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    verification = await verify_payroll_record(db, data.payroll_entry_id, current_user.branch_id)
    return VerifyResponse(
        message="Payroll record verification completed",
        verification=verification,
    )


@router.get("/record/{transaction_hash}", response_model=RecordLookupResponse)
@handle_endpoint_errors(operation_name="get_blockchain_record")
async def record_endpoint(
    transaction_hash: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    record = await get_record_by_transaction_hash(db, transaction_hash, current_user.branch_id)
    return RecordLookupResponse(record=record)
