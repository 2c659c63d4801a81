"""
Payroll computation and payroll entry lifecycle.

Hours and money are Decimal end to end so the pay formulas hold exactly:
    regular = min(total, cap), overtime = max(0, total - cap)
    gross = regular * rate + overtime * rate * 1.5
    deductions = gross * 0.15, net = gross - deductions
"""
from dataclasses import dataclass
from typing import Optional, List, Tuple
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
import logging
import uuid

from cafeshift.core.config import settings
from cafeshift.core.query_builder import filter_by_datetime_range
from cafeshift.models.notification import NotificationType
from cafeshift.models.payroll import PayrollPeriod, PayrollPeriodStatus, PayrollEntry, PayrollEntryStatus
from cafeshift.models.shift import Shift
from cafeshift.models.user import User
from cafeshift.schemas.payroll import PayrollPeriodCreate
from cafeshift.services.notification_service import create_notification
from cafeshift.services.timezone_service import format_month_day, format_month_day_year

logger = logging.getLogger(__name__)

# Pay rules
OVERTIME_THRESHOLD_HOURS_PER_WEEK = Decimal("40")
OVERTIME_MULTIPLIER = Decimal("1.5")
DEDUCTION_RATE = Decimal("0.15")

SECONDS_PER_HOUR = Decimal(3600)
HOURS_PER_WEEK = Decimal(24 * 7)
ZERO = Decimal(0)


@dataclass(frozen=True)
class PayBreakdown:
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal


@dataclass
class PayrollRunResult:
    entries: List[PayrollEntry]
    total_hours: Decimal
    total_pay: Decimal


def hours_between(start: datetime, end: datetime) -> Decimal:
    """Exact fractional hours from start to end."""
    delta = end - start
    seconds = Decimal(delta.days * 86400 + delta.seconds) + Decimal(delta.microseconds) / Decimal(1_000_000)
    return seconds / SECONDS_PER_HOUR


def compute_shift_hours(shift) -> Decimal:
    """Worked hours for a shift, preferring clocked times over scheduled ones."""
    start = shift.actual_start_time or shift.start_time
    end = shift.actual_end_time or shift.end_time
    return hours_between(start, end)


def compute_regular_hours_cap(period_start: datetime, period_end: datetime) -> Decimal:
    """40 hours per 7 days of period length; fractional weeks allowed."""
    return OVERTIME_THRESHOLD_HOURS_PER_WEEK * hours_between(period_start, period_end) / HOURS_PER_WEEK


def calculate_pay(total_hours: Decimal, hourly_rate: Decimal, regular_hours_cap: Decimal) -> PayBreakdown:
    total_hours = Decimal(total_hours)
    hourly_rate = Decimal(hourly_rate)

    regular_hours = min(total_hours, regular_hours_cap)
    overtime_hours = max(ZERO, total_hours - regular_hours_cap)

    gross_pay = regular_hours * hourly_rate + overtime_hours * hourly_rate * OVERTIME_MULTIPLIER
    deductions = gross_pay * DEDUCTION_RATE
    net_pay = gross_pay - deductions

    return PayBreakdown(
        total_hours=total_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        gross_pay=gross_pay,
        deductions=deductions,
        net_pay=net_pay,
    )


def format_money(amount: Decimal) -> str:
    return f"{settings.CURRENCY_SYMBOL}{Decimal(amount):.2f}"


# Periods

async def create_payroll_period(
    db: AsyncSession,
    branch_id: UUID,
    data: PayrollPeriodCreate,
) -> PayrollPeriod:
    period = PayrollPeriod(
        id=uuid.uuid4(),
        branch_id=branch_id,
        start_date=data.start_date,
        end_date=data.end_date,
        status=PayrollPeriodStatus.OPEN,
    )
    db.add(period)
    await db.commit()
    await db.refresh(period)
    logger.info(f"Payroll period {period.id} created for branch {branch_id}")
    return period


async def list_payroll_periods(db: AsyncSession, branch_id: UUID) -> List[PayrollPeriod]:
    result = await db.execute(
        select(PayrollPeriod)
        .where(PayrollPeriod.branch_id == branch_id)
        .order_by(PayrollPeriod.start_date.desc())
    )
    return list(result.scalars().all())


async def get_current_payroll_period(db: AsyncSession, branch_id: UUID) -> Optional[PayrollPeriod]:
    """Most recent open period of the branch, or None."""
    result = await db.execute(
        select(PayrollPeriod)
        .where(
            PayrollPeriod.branch_id == branch_id,
            PayrollPeriod.status == PayrollPeriodStatus.OPEN,
        )
        .order_by(PayrollPeriod.start_date.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_payroll_period(db: AsyncSession, period_id: UUID, branch_id: UUID) -> PayrollPeriod:
    result = await db.execute(
        select(PayrollPeriod).where(
            PayrollPeriod.id == period_id,
            PayrollPeriod.branch_id == branch_id,
        )
    )
    period = result.scalar_one_or_none()
    if not period:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll period not found",
        )
    return period


async def process_payroll_period(
    db: AsyncSession,
    period_id: UUID,
    branch_id: UUID,
) -> PayrollRunResult:
    """
    Compute a pending entry for every active user of the branch with shifts
    in the period, notify them, and close the period.

    Runs as a single transaction. The period is claimed with a conditional
    UPDATE, so a second or concurrent run fails with 400 instead of creating
    duplicate entries. Any failure rolls everything back and leaves the
    period open.
    """
    period = await get_payroll_period(db, period_id, branch_id)
    if period.status != PayrollPeriodStatus.OPEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payroll period is not open",
        )

    try:
        claim = await db.execute(
            update(PayrollPeriod)
            .where(
                PayrollPeriod.id == period_id,
                PayrollPeriod.status == PayrollPeriodStatus.OPEN,
            )
            .values(status=PayrollPeriodStatus.CLOSED)
            .execution_options(synchronize_session=False)
        )
        if claim.rowcount != 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payroll period is not open",
            )

        result = await db.execute(
            select(User)
            .where(User.branch_id == branch_id, User.is_active == True)
            .order_by(User.last_name, User.first_name)
        )
        users = list(result.scalars().all())

        regular_cap = compute_regular_hours_cap(period.start_date, period.end_date)
        period_label = f"{format_month_day(period.start_date)} - {format_month_day_year(period.end_date)}"

        entries: List[PayrollEntry] = []
        total_hours = ZERO
        total_pay = ZERO

        for user in users:
            shift_query = filter_by_datetime_range(
                select(Shift).where(Shift.user_id == user.id),
                Shift,
                "start_time",
                period.start_date,
                period.end_date,
            )
            shifts = (await db.execute(shift_query)).scalars().all()
            if not shifts:
                continue

            worked = sum((compute_shift_hours(s) for s in shifts), ZERO)
            pay = calculate_pay(worked, user.hourly_rate, regular_cap)

            entry = PayrollEntry(
                id=uuid.uuid4(),
                user_id=user.id,
                payroll_period_id=period.id,
                total_hours=pay.total_hours,
                regular_hours=pay.regular_hours,
                overtime_hours=pay.overtime_hours,
                gross_pay=pay.gross_pay,
                deductions=pay.deductions,
                net_pay=pay.net_pay,
                status=PayrollEntryStatus.PENDING,
                verified=False,
            )
            db.add(entry)
            entries.append(entry)

            create_notification(
                db,
                user_id=user.id,
                type=NotificationType.PAYROLL,
                title="Payroll Slip Available",
                message=(
                    f"Your payroll slip for {period_label} is now available. "
                    f"Net Pay: {format_money(pay.net_pay)}"
                ),
                data={
                    "entry_id": str(entry.id),
                    "period_id": str(period.id),
                    "net_pay": f"{pay.net_pay:.2f}",
                },
            )

            total_hours += pay.total_hours
            total_pay += pay.gross_pay

        await db.execute(
            update(PayrollPeriod)
            .where(PayrollPeriod.id == period_id)
            .values(total_hours=total_hours, total_pay=total_pay)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Duplicate payroll entries rejected for period {period_id}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payroll period has already been processed",
        )
    except Exception:
        await db.rollback()
        logger.error(f"Payroll processing failed for period {period_id}; rolled back", exc_info=True)
        raise

    await db.refresh(period)
    logger.info(
        f"Payroll period {period_id} processed: {len(entries)} entries, "
        f"{total_hours} hours, gross {total_pay}"
    )
    return PayrollRunResult(entries=entries, total_hours=total_hours, total_pay=total_pay)


# Entries

async def get_user_payroll_entries(
    db: AsyncSession,
    user_id: UUID,
    period_id: Optional[UUID] = None,
) -> List[PayrollEntry]:
    query = select(PayrollEntry).where(PayrollEntry.user_id == user_id)
    if period_id:
        query = query.where(PayrollEntry.payroll_period_id == period_id)
    result = await db.execute(query.order_by(PayrollEntry.created_at.desc()))
    return list(result.scalars().all())


async def get_branch_payroll_entries(
    db: AsyncSession,
    branch_id: UUID,
    period_id: Optional[UUID] = None,
) -> List[Tuple[PayrollEntry, User]]:
    """Entries of active users in the branch, with the user row."""
    query = (
        select(PayrollEntry, User)
        .join(User, PayrollEntry.user_id == User.id)
        .where(User.branch_id == branch_id, User.is_active == True)
    )
    if period_id:
        query = query.where(PayrollEntry.payroll_period_id == period_id)
    result = await db.execute(query.order_by(User.last_name, User.first_name, PayrollEntry.created_at.desc()))
    return [(entry, user) for entry, user in result.all()]


async def get_branch_entry(
    db: AsyncSession,
    entry_id: UUID,
    branch_id: UUID,
) -> Tuple[PayrollEntry, User]:
    result = await db.execute(
        select(PayrollEntry, User)
        .join(User, PayrollEntry.user_id == User.id)
        .where(PayrollEntry.id == entry_id, User.branch_id == branch_id)
    )
    row = result.first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll entry not found",
        )
    return row[0], row[1]


async def approve_payroll_entry(db: AsyncSession, entry_id: UUID, branch_id: UUID) -> PayrollEntry:
    entry, _ = await get_branch_entry(db, entry_id, branch_id)
    if entry.status != PayrollEntryStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only pending entries can be approved (entry is {entry.status.value})",
        )
    entry.status = PayrollEntryStatus.APPROVED
    await db.commit()
    await db.refresh(entry)
    return entry


async def mark_payroll_entry_paid(db: AsyncSession, entry_id: UUID, branch_id: UUID) -> PayrollEntry:
    """Mark an approved entry as paid; the period becomes paid once all its entries are."""
    entry, _ = await get_branch_entry(db, entry_id, branch_id)
    if entry.status != PayrollEntryStatus.APPROVED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only approved entries can be marked as paid (entry is {entry.status.value})",
        )
    entry.status = PayrollEntryStatus.PAID
    await db.flush()

    unpaid = await db.execute(
        select(func.count()).select_from(PayrollEntry).where(
            PayrollEntry.payroll_period_id == entry.payroll_period_id,
            PayrollEntry.status != PayrollEntryStatus.PAID,
        )
    )
    if (unpaid.scalar() or 0) == 0:
        await db.execute(
            update(PayrollPeriod)
            .where(
                PayrollPeriod.id == entry.payroll_period_id,
                PayrollPeriod.status == PayrollPeriodStatus.CLOSED,
            )
            .values(status=PayrollPeriodStatus.PAID)
            .execution_options(synchronize_session=False)
        )

    await db.commit()
    await db.refresh(entry)
    return entry


async def send_payslip(db: AsyncSession, entry_id: UUID, branch_id: UUID) -> None:
    """Notify the employee that their payslip is ready. State is unchanged."""
    entry, employee = await get_branch_entry(db, entry_id, branch_id)
    create_notification(
        db,
        user_id=employee.id,
        type=NotificationType.PAYROLL,
        title="Payslip Sent",
        message=f"Your payslip has been sent by your manager. Net Pay: {format_money(entry.net_pay)}",
        data={"entry_id": str(entry.id), "net_pay": f"{Decimal(entry.net_pay):.2f}"},
    )
    await db.commit()


async def get_payslip(db: AsyncSession, entry_id: UUID, viewer: User, viewer_is_manager: bool) -> dict:
    """
    Payslip data for an entry. Employees only see their own entries;
    managers see any entry in their branch.
    """
    query = (
        select(PayrollEntry, User, PayrollPeriod)
        .join(User, PayrollEntry.user_id == User.id)
        .join(PayrollPeriod, PayrollEntry.payroll_period_id == PayrollPeriod.id)
        .where(PayrollEntry.id == entry_id)
    )
    if viewer_is_manager:
        query = query.where(User.branch_id == viewer.branch_id)
    else:
        query = query.where(PayrollEntry.user_id == viewer.id)

    row = (await db.execute(query)).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll entry not found",
        )
    entry, employee, period = row

    return {
        "entry_id": entry.id,
        "employee_name": employee.full_name,
        "employee_id": employee.id,
        "position": employee.position,
        "period_start": period.start_date,
        "period_end": period.end_date,
        "regular_hours": entry.regular_hours,
        "overtime_hours": entry.overtime_hours,
        "total_hours": entry.total_hours,
        "hourly_rate": employee.hourly_rate,
        "gross_pay": entry.gross_pay,
        "deductions": entry.deductions,
        "net_pay": entry.net_pay,
        "status": entry.status,
        "blockchain_hash": entry.blockchain_hash,
    }
