from pydantic import EmailStr, Field, field_validator
from typing import Optional

from ..models import CustomModel


def _clean_username(v: str) -> str:
    # 공백만 있는 이름은 strip 후 빈 문자열이 되므로 거부
    v = v.strip()
    if not v:
        raise ValueError("username must not be blank")
    return v


class UserBase(CustomModel):
    email: EmailStr = Field(..., json_schema_extra={"example": "user@example.com"})
    username: str = Field(..., min_length=1, max_length=50, json_schema_extra={"example": "berra"})

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return _clean_username(v)

class UserCreate(UserBase):
    password: str = Field(..., min_length=8, json_schema_extra={"example": "strongpassword123"})

class UserUpdate(CustomModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    bio: Optional[str] = None
    image: Optional[str] = Field(None, max_length=255)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _clean_username(v)

class UserPublic(CustomModel):
    email: str
    username: str

class UserMe(UserPublic):
    id: int
    bio: Optional[str] = None
    image: Optional[str] = None
    activated: bool
    provider: Optional[str] = None

class SignupResponse(CustomModel):
    status: int = 201
    message: str = "user created"
    user: UserPublic

class Profile(CustomModel):
    username: str
    bio: Optional[str] = None
    image: Optional[str] = None
    following: bool = False

class ProfileResponse(CustomModel):
    status: int = 200
    profile: Profile

class PasswordResetRequest(CustomModel):
    email: EmailStr

class PasswordUpdate(CustomModel):
    password: str = Field(..., min_length=8)
    password2: str = Field(..., min_length=8)
