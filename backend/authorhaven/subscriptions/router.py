from fastapi import APIRouter, status

from ..auth.dependencies import CurrentUser
from ..database import SessionDep
from ..models import StatusMessage
from ..users.models import User
from . import service

router = APIRouter(tags=["subscriptions"])


@router.post("/subscribe/{slug_or_username}", response_model=StatusMessage)
async def subscribe(slug_or_username: str, db: SessionDep, current_user: User = CurrentUser):
    await service.subscribe(db, current_user, slug_or_username)
    return StatusMessage(status=status.HTTP_200_OK, message="successfully subscribed")


@router.post("/unsubscribe/{slug_or_username}", response_model=StatusMessage)
async def unsubscribe(slug_or_username: str, db: SessionDep, current_user: User = CurrentUser):
    await service.unsubscribe(db, current_user, slug_or_username)
    return StatusMessage(status=status.HTTP_200_OK, message="successfully unsubscribed")
