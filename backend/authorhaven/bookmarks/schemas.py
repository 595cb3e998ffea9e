from typing import List, Optional

from ..models import CustomModel


class BookmarkAuthor(CustomModel):
    username: str
    image: Optional[str] = None


class BookmarkedArticle(CustomModel):
    title: str
    slug: str
    author: BookmarkAuthor


class BookmarkCreated(CustomModel):
    title: str
    body: str
    description: str


class BookmarkCreateResponse(CustomModel):
    status: int = 200
    message: str
    data: BookmarkCreated


class BookmarkListResponse(CustomModel):
    status: int = 200
    data: List[BookmarkedArticle]


class BookmarkResponse(CustomModel):
    status: int = 200
    data: BookmarkedArticle
