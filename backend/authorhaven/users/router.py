from typing import Optional

from fastapi import APIRouter

from ..database import SessionDep
from ..users.models import User as UserModel
from ..auth.dependencies import CurrentUser, OptionalUser

from .schema import UserUpdate, UserMe, ProfileResponse
from . import service as user_service

router = APIRouter(tags=["users"])


@router.get("/users/me", response_model=UserMe)
async def read_users_me(current_user: UserModel = CurrentUser):
    return current_user


@router.patch("/users/me", response_model=UserMe)
async def update_users_me(
    db: SessionDep,
    user_update_data: UserUpdate,
    current_user: UserModel = CurrentUser,
):
    return await user_service.update_user(db, db_user=current_user, user_in=user_update_data)


@router.get("/profiles/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    db: SessionDep,
    viewer: Optional[UserModel] = OptionalUser,
):
    profile = await user_service.get_profile(username, db, viewer)
    return ProfileResponse(profile=profile)


@router.post("/profiles/{username}/follow", response_model=ProfileResponse)
async def follow(username: str, db: SessionDep, current_user: UserModel = CurrentUser):
    profile = await user_service.follow_user(current_user, username, db)
    return ProfileResponse(profile=profile)


@router.delete("/profiles/{username}/follow", response_model=ProfileResponse)
async def unfollow(username: str, db: SessionDep, current_user: UserModel = CurrentUser):
    profile = await user_service.unfollow_user(current_user, username, db)
    return ProfileResponse(profile=profile)
