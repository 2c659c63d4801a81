from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi import HTTPException, status
import logging

from cafeshift.models.user import User
from cafeshift.models.session import Session
from cafeshift.core.security import verify_password, create_session_token, read_session_claims
from cafeshift.core.config import settings
from cafeshift.schemas.auth import LoginRequest

logger = logging.getLogger(__name__)


async def login(
    db: AsyncSession,
    request: LoginRequest,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[User, str]:
    """Authenticate by username/password and open a server-side session."""
    result = await db.execute(
        select(User).where(User.username == request.username.strip())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(request.password, user.password_hash):
        logger.info(f"Failed login attempt for username '{request.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is inactive",
        )

    expires_delta = timedelta(hours=settings.SESSION_MAX_AGE_HOURS)
    session = Session(
        user_id=user.id,
        expires_at=datetime.utcnow() + expires_delta,
        ip=ip,
        user_agent=user_agent[:500] if user_agent else None,
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)

    token = create_session_token(
        session_id=session.id,
        user_id=user.id,
        role=user.role.value,
        branch_id=user.branch_id,
        expires_at=session.expires_at,
    )
    logger.info(f"User {user.username} logged in")
    return user, token


async def logout(
    db: AsyncSession,
    session_token: Optional[str],
) -> None:
    """Revoke the session referenced by the cookie, if any."""
    claims = read_session_claims(session_token)
    if claims is None:
        return

    result = await db.execute(select(Session).where(Session.id == claims.session_id))
    session = result.scalar_one_or_none()
    if session and session.revoked_at is None:
        session.revoked_at = datetime.utcnow()
        await db.commit()
