from pydantic import BaseModel, Field

from cafeshift.schemas.user import UserResponse


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=255)


class AuthUserResponse(BaseModel):
    user: UserResponse
