"""
Tamper-evidence hashes for payroll entries.

Each stored entry gets the SHA-256 of its canonical record, a transaction
hash over (record hash, entry id, timestamp) and a monotonically increasing
block number. There is no chain or external ledger: verification recomputes
the record hash from the current row and compares it with the stored one.
"""
from typing import List, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from fastapi import HTTPException, status
import logging

from cafeshift.core.hashing import hash_payload, hash_parts
from cafeshift.models.payroll import PayrollEntry, PayrollPeriod
from cafeshift.models.user import User

logger = logging.getLogger(__name__)


def build_payroll_record(entry: PayrollEntry, employee: User, period: PayrollPeriod) -> dict:
    """Canonical content covered by the record hash."""
    return {
        "id": entry.id,
        "employee_id": employee.id,
        "employee_name": employee.full_name,
        "period_id": period.id,
        "period_start": period.start_date,
        "period_end": period.end_date,
        "total_hours": entry.total_hours,
        "regular_hours": entry.regular_hours,
        "overtime_hours": entry.overtime_hours,
        "hourly_rate": employee.hourly_rate,
        "gross_pay": entry.gross_pay,
        "deductions": entry.deductions,
        "net_pay": entry.net_pay,
    }


def compute_record_hash(entry: PayrollEntry, employee: User, period: PayrollPeriod) -> str:
    return hash_payload(build_payroll_record(entry, employee, period))


def _entries_query(branch_id: UUID):
    return (
        select(PayrollEntry, User, PayrollPeriod)
        .join(User, PayrollEntry.user_id == User.id)
        .join(PayrollPeriod, PayrollEntry.payroll_period_id == PayrollPeriod.id)
        .where(User.branch_id == branch_id)
    )


async def _get_branch_entry(db: AsyncSession, entry_id: UUID, branch_id: UUID) -> Tuple[PayrollEntry, User, PayrollPeriod]:
    row = (await db.execute(_entries_query(branch_id).where(PayrollEntry.id == entry_id))).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll entry not found",
        )
    return row[0], row[1], row[2]


async def _next_block_number(db: AsyncSession) -> int:
    result = await db.execute(select(func.max(PayrollEntry.block_number)))
    return (result.scalar() or 0) + 1


def _stamp(entry: PayrollEntry, employee: User, period: PayrollPeriod, block_number: int) -> dict:
    timestamp = datetime.utcnow()
    record_hash = compute_record_hash(entry, employee, period)
    entry.blockchain_hash = record_hash
    entry.transaction_hash = hash_parts(record_hash, entry.id, timestamp.isoformat())
    entry.block_number = block_number
    entry.verified = True
    return {
        "id": entry.id,
        "blockchain_hash": entry.blockchain_hash,
        "transaction_hash": entry.transaction_hash,
        "block_number": block_number,
        "timestamp": timestamp,
    }


async def store_payroll_record(db: AsyncSession, entry_id: UUID, branch_id: UUID) -> dict:
    entry, employee, period = await _get_branch_entry(db, entry_id, branch_id)
    record = _stamp(entry, employee, period, await _next_block_number(db))
    await db.commit()
    logger.info(f"Payroll entry {entry.id} stored as block {record['block_number']}")
    return record


async def batch_store_payroll_records(db: AsyncSession, entry_ids: List[UUID], branch_id: UUID) -> List[dict]:
    """Store every listed entry of the branch; unknown ids are skipped."""
    result = await db.execute(
        _entries_query(branch_id)
        .where(PayrollEntry.id.in_(entry_ids))
        .order_by(PayrollEntry.created_at)
    )
    rows = result.all()
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No valid payroll entries found",
        )

    block_number = await _next_block_number(db)
    records = []
    for entry, employee, period in rows:
        records.append(_stamp(entry, employee, period, block_number))
        block_number += 1

    await db.commit()
    logger.info(f"Stored {len(records)} payroll entries for branch {branch_id}")
    return records


async def verify_payroll_record(db: AsyncSession, entry_id: UUID, branch_id: UUID) -> dict:
    entry, employee, period = await _get_branch_entry(db, entry_id, branch_id)
    if not entry.blockchain_hash:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payroll entry not stored on blockchain",
        )

    computed = compute_record_hash(entry, employee, period)
    is_valid = computed == entry.blockchain_hash
    if not is_valid:
        logger.warning(f"Payroll entry {entry.id} failed hash verification")

    return {
        "entry_id": entry.id,
        "is_valid": is_valid,
        "stored_hash": entry.blockchain_hash,
        "computed_hash": computed,
        "block_number": entry.block_number,
        "transaction_hash": entry.transaction_hash,
    }


async def get_record_by_transaction_hash(db: AsyncSession, transaction_hash: str, branch_id: UUID) -> dict:
    row = (
        await db.execute(
            _entries_query(branch_id).where(PayrollEntry.transaction_hash == transaction_hash)
        )
    ).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blockchain record not found",
        )
    entry = row[0]
    return {
        "entry_id": entry.id,
        "employee_id": entry.user_id,
        "blockchain_hash": entry.blockchain_hash,
        "transaction_hash": entry.transaction_hash,
        "block_number": entry.block_number,
        "verified": entry.verified,
    }
