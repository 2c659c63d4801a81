from typing import Optional
from fastapi import APIRouter, Cookie, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.config import settings
from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user
from cafeshift.core.error_handling import handle_endpoint_errors
from cafeshift.models.user import User
from cafeshift.schemas.auth import LoginRequest, AuthUserResponse
from cafeshift.schemas.common import MessageResponse
from cafeshift.schemas.user import UserResponse
from cafeshift.services.auth_service import login, logout

router = APIRouter()


@router.post("/login", response_model=AuthUserResponse)
@handle_endpoint_errors(operation_name="login")
async def login_endpoint(
    login_data: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Login with username and password; sets the session cookie."""
    user, token = await login(
        db,
        login_data,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_HOURS * 3600,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return AuthUserResponse(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
@handle_endpoint_errors(operation_name="logout")
async def logout_endpoint(
    response: Response,
    session_token: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the current session and clear the cookie."""
    await logout(db, session_token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AuthUserResponse)
@handle_endpoint_errors(operation_name="get_me")
async def me_endpoint(current_user: User = Depends(get_current_user)):
    return AuthUserResponse(user=UserResponse.model_validate(current_user))
