from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi import HTTPException, status
import logging

from cafeshift.models.branch import Branch
from cafeshift.schemas.branch import BranchCreate, BranchUpdate

logger = logging.getLogger(__name__)


async def list_branches(db: AsyncSession, include_inactive: bool = True) -> List[Branch]:
    query = select(Branch)
    if not include_inactive:
        query = query.where(Branch.is_active == True)
    result = await db.execute(query.order_by(Branch.name))
    return list(result.scalars().all())


async def get_branch(db: AsyncSession, branch_id: UUID) -> Branch:
    result = await db.execute(select(Branch).where(Branch.id == branch_id))
    branch = result.scalar_one_or_none()
    if not branch:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Branch not found",
        )
    return branch


async def create_branch(db: AsyncSession, data: BranchCreate) -> Branch:
    branch = Branch(**data.model_dump())
    db.add(branch)
    await db.commit()
    await db.refresh(branch)
    logger.info(f"Branch created: {branch.name} ({branch.id})")
    return branch


async def update_branch(db: AsyncSession, branch_id: UUID, data: BranchUpdate) -> Branch:
    branch = await get_branch(db, branch_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(branch, field, value)
    await db.commit()
    await db.refresh(branch)
    return branch
