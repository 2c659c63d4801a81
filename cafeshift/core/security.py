from datetime import datetime
from typing import Optional, NamedTuple
from uuid import UUID
from jose import JWTError, jwt
from passlib.context import CryptContext
import logging

from cafeshift.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SESSION_TOKEN_TYPE = "session"


class SessionClaims(NamedTuple):
    session_id: UUID
    user_id: UUID
    role: Optional[str]
    branch_id: Optional[str]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its argon2 hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_session_token(
    session_id: UUID,
    user_id: UUID,
    role: str,
    branch_id: UUID,
    expires_at: datetime,
) -> str:
    """Sign the cookie value that points at a server-side session row."""
    claims = {
        "sid": str(session_id),
        "sub": str(user_id),
        "role": role,
        "branch_id": str(branch_id),
        "exp": expires_at,
        "type": SESSION_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_session_claims(token: Optional[str]) -> Optional[SessionClaims]:
    """
    Verify the signature and expiry of a session token.

    Returns None for anything that is not a well-formed session token; the
    caller still has to check the session row.
    """
    if not token or not isinstance(token, str) or not token.strip():
        return None

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Session token rejected: {str(e)}")
        return None

    if payload.get("type") != SESSION_TOKEN_TYPE:
        return None
    try:
        return SessionClaims(
            session_id=UUID(payload.get("sid", "")),
            user_id=UUID(payload.get("sub", "")),
            role=payload.get("role"),
            branch_id=payload.get("branch_id"),
        )
    except ValueError:
        return None


def normalize_email(email: str) -> str:
    """Normalize email address (lowercase, trim)."""
    return email.lower().strip()
