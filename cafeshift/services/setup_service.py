"""
One-time setup wizard: first branch and first manager.
"""
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
import logging

from cafeshift.core.hashing import hash_user_record
from cafeshift.core.security import get_password_hash, normalize_email
from cafeshift.models.branch import Branch
from cafeshift.models.setup_status import SetupStatus
from cafeshift.models.user import User, UserRole
from cafeshift.schemas.setup import SetupRequest

logger = logging.getLogger(__name__)

MANAGER_POSITION = "Store Manager"


async def is_setup_complete(db: AsyncSession) -> bool:
    result = await db.execute(
        select(SetupStatus).where(SetupStatus.is_setup_complete == True).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def run_setup(db: AsyncSession, data: SetupRequest) -> tuple[Branch, User]:
    """Create the first branch and its manager, then mark setup complete."""
    if await is_setup_complete(db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Setup already completed",
        )

    branch = Branch(
        name=data.branch.name,
        address=data.branch.address,
        phone=data.branch.phone,
        is_active=True,
    )
    db.add(branch)
    await db.flush()

    email = normalize_email(data.manager.email)
    now = datetime.utcnow()
    manager = User(
        username=data.manager.username.strip(),
        password_hash=get_password_hash(data.manager.password),
        first_name=data.manager.first_name,
        last_name=data.manager.last_name,
        email=email,
        role=UserRole.MANAGER,
        position=MANAGER_POSITION,
        hourly_rate=data.manager.hourly_rate,
        branch_id=branch.id,
        is_active=True,
        blockchain_verified=True,
        blockchain_hash=hash_user_record(
            data.manager.username.strip(),
            data.manager.first_name,
            data.manager.last_name,
            email,
        ),
        verified_at=now,
    )
    db.add(manager)
    db.add(SetupStatus(is_setup_complete=True, setup_completed_at=now))

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if await is_setup_complete(db):
            logger.warning("Concurrent setup rejected: setup already completed")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Setup already completed",
            )
        raise
    except Exception:
        await db.rollback()
        raise
    await db.refresh(branch)
    await db.refresh(manager)

    logger.info(f"Setup completed: branch '{branch.name}', manager '{manager.username}'")
    return branch, manager
