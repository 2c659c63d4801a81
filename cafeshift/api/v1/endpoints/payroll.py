from typing import Optional
from io import BytesIO
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager, is_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.pdf_templates.payslip import generate_payslip_pdf
from cafeshift.schemas.common import UserSummary, MessageResponse
from cafeshift.schemas.payroll import (
    PayrollPeriodCreate,
    PayrollPeriodResponse,
    PayrollPeriodEnvelope,
    PayrollPeriodListResponse,
    ProcessPayrollResponse,
    PayrollEntryResponse,
    PayrollEntryWithEmployeeResponse,
    PayrollEntryEnvelope,
    PayrollEntryListResponse,
    BranchPayrollEntryListResponse,
    Payslip,
    PayslipResponse,
)
from cafeshift.services.branch_service import get_branch
from cafeshift.services.payroll_service import (
    create_payroll_period,
    list_payroll_periods,
    get_current_payroll_period,
    process_payroll_period,
    get_user_payroll_entries,
    get_branch_payroll_entries,
    approve_payroll_entry,
    mark_payroll_entry_paid,
    send_payslip,
    get_payslip,
)

router = APIRouter()


@router.get("", response_model=PayrollEntryListResponse)
@handle_endpoint_errors(operation_name="get_my_payroll")
async def my_payroll_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own payroll entries."""
    entries = await get_user_payroll_entries(db, current_user.id)
    return PayrollEntryListResponse(entries=[PayrollEntryResponse.model_validate(e) for e in entries])


@router.get("/periods", response_model=PayrollPeriodListResponse)
@handle_endpoint_errors(operation_name="list_payroll_periods")
async def list_periods_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    periods = await list_payroll_periods(db, current_user.branch_id)
    return PayrollPeriodListResponse(periods=[PayrollPeriodResponse.model_validate(p) for p in periods])


@router.get("/periods/current", response_model=PayrollPeriodEnvelope)
@handle_endpoint_errors(operation_name="get_current_payroll_period")
async def current_period_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    period = await get_current_payroll_period(db, current_user.branch_id)
    return PayrollPeriodEnvelope(period=PayrollPeriodResponse.model_validate(period) if period else None)


@router.post("/periods", response_model=PayrollPeriodEnvelope, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_payroll_period")
async def create_period_endpoint(
    data: PayrollPeriodCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    period = await create_payroll_period(db, current_user.branch_id, data)
    return PayrollPeriodEnvelope(period=PayrollPeriodResponse.model_validate(period))


@router.post("/periods/{period_id}/process", response_model=ProcessPayrollResponse)
@handle_endpoint_errors(operation_name="process_payroll")
async def process_period_endpoint(
    period_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Compute entries for every active employee with shifts and close the period."""
    run = await process_payroll_period(db, parse_uuid(period_id, "Payroll period ID"), current_user.branch_id)
    return ProcessPayrollResponse(
        message=f"Payroll processed successfully for {len(run.entries)} employees",
        entries_created=len(run.entries),
        total_hours=run.total_hours,
        total_pay=run.total_pay,
    )


@router.get("/entries/branch", response_model=BranchPayrollEntryListResponse)
@handle_endpoint_errors(operation_name="get_branch_payroll_entries")
async def branch_entries_endpoint(
    period_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_branch_payroll_entries(
        db,
        current_user.branch_id,
        parse_uuid(period_id, "Payroll period ID") if period_id else None,
    )
    return BranchPayrollEntryListResponse(
        entries=[
            PayrollEntryWithEmployeeResponse(
                **PayrollEntryResponse.model_validate(entry).model_dump(),
                employee=UserSummary.model_validate(employee),
            )
            for entry, employee in rows
        ]
    )


@router.put("/entries/{entry_id}/approve", response_model=PayrollEntryEnvelope)
@handle_endpoint_errors(operation_name="approve_payroll_entry")
async def approve_entry_endpoint(
    entry_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    entry = await approve_payroll_entry(db, parse_uuid(entry_id, "Payroll entry ID"), current_user.branch_id)
    return PayrollEntryEnvelope(entry=PayrollEntryResponse.model_validate(entry))


@router.put("/entries/{entry_id}/paid", response_model=PayrollEntryEnvelope)
@handle_endpoint_errors(operation_name="mark_payroll_entry_paid")
async def paid_entry_endpoint(
    entry_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    entry = await mark_payroll_entry_paid(db, parse_uuid(entry_id, "Payroll entry ID"), current_user.branch_id)
    return PayrollEntryEnvelope(entry=PayrollEntryResponse.model_validate(entry))


@router.post("/entries/{entry_id}/send", response_model=MessageResponse)
@handle_endpoint_errors(operation_name="send_payslip")
async def send_payslip_endpoint(
    entry_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    await send_payslip(db, parse_uuid(entry_id, "Payroll entry ID"), current_user.branch_id)
    return MessageResponse(message="Payslip sent to employee successfully")


@router.get("/payslip/{entry_id}", response_model=PayslipResponse)
@handle_endpoint_errors(operation_name="get_payslip")
async def payslip_endpoint(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payslip = await get_payslip(
        db, parse_uuid(entry_id, "Payroll entry ID"), current_user, is_manager(current_user)
    )
    return PayslipResponse(payslip=Payslip(**payslip))


@router.get("/payslip/{entry_id}/pdf")
@handle_endpoint_errors(operation_name="get_payslip_pdf")
async def payslip_pdf_endpoint(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download the payslip as a PDF."""
    payslip = await get_payslip(
        db, parse_uuid(entry_id, "Payroll entry ID"), current_user, is_manager(current_user)
    )
    branch = await get_branch(db, current_user.branch_id)

    pdf_bytes = generate_payslip_pdf(
        branch_name=branch.name,
        payslip=payslip,
        record_hash=payslip.get("blockchain_hash"),
    )
    filename = f"payslip-{payslip['period_start']:%Y%m%d}-{payslip['employee_name'].replace(' ', '_')}.pdf"

    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
