from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID


class StoreRecordRequest(BaseModel):
    payroll_entry_id: UUID


class BatchStoreRequest(BaseModel):
    payroll_entry_ids: List[UUID] = Field(..., min_length=1)


class BlockchainRecord(BaseModel):
    id: UUID
    blockchain_hash: str
    transaction_hash: str
    block_number: int
    timestamp: datetime


class StoreRecordResponse(BaseModel):
    message: str
    blockchain_record: BlockchainRecord


class BatchStoreResponse(BaseModel):
    message: str
    stored_count: int
    results: List[BlockchainRecord]


class Verification(BaseModel):
    entry_id: UUID
    is_valid: bool
    stored_hash: str
    computed_hash: str
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None


class VerifyResponse(BaseModel):
    message: str
    verification: Verification


class RecordLookup(BaseModel):
    entry_id: UUID
    employee_id: UUID
    blockchain_hash: str
    transaction_hash: str
    block_number: Optional[int] = None
    verified: bool


class RecordLookupResponse(BaseModel):
    record: RecordLookup
