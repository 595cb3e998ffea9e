from fastapi import APIRouter, status

from ..auth.dependencies import CurrentUser
from ..database import SessionDep
from ..models import StatusMessage
from ..users.models import User
from .schemas import BookmarkCreateResponse, BookmarkListResponse, BookmarkResponse
from . import service

router = APIRouter(tags=["bookmarks"])


@router.post("/articles/{slug}/bookmark", response_model=BookmarkCreateResponse)
async def create_bookmark(slug: str, db: SessionDep, current_user: User = CurrentUser):
    message, data = await service.create_bookmark(db, current_user, slug)
    return BookmarkCreateResponse(message=message, data=data)


@router.delete("/articles/{slug}/bookmark", response_model=StatusMessage)
async def delete_bookmark(slug: str, db: SessionDep, current_user: User = CurrentUser):
    await service.delete_bookmark(db, current_user, slug)
    return StatusMessage(status=status.HTTP_200_OK, message="Bookmark cleared successfully")


@router.get("/bookmarks", response_model=BookmarkListResponse)
async def list_bookmarks(db: SessionDep, current_user: User = CurrentUser):
    return BookmarkListResponse(data=await service.list_bookmarks(db, current_user))


@router.get("/bookmarks/{slug}", response_model=BookmarkResponse)
async def get_bookmark(slug: str, db: SessionDep, current_user: User = CurrentUser):
    return BookmarkResponse(data=await service.get_bookmark(db, current_user, slug))
