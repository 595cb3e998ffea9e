from typing import Optional

from pydantic import EmailStr, Field

from ..models import CustomModel


class LoginRequest(CustomModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SocialLoginRequest(CustomModel):
    access_token: str = Field(..., min_length=1)


class AuthenticatedUser(CustomModel):
    email: str
    token: str
    username: str
    bio: Optional[str] = None
    image: Optional[str] = None


class LoginResponse(CustomModel):
    status: int = 200
    user: AuthenticatedUser


class SocialUser(CustomModel):
    id: int
    username: str
    email: str
    provider: Optional[str] = None


class SocialLoginResponse(CustomModel):
    status: int
    token: str
    data: SocialUser
