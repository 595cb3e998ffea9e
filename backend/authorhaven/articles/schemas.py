from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models import CustomModel
from .models import ArticleStatus, LikeStatus


class ArticleCreate(CustomModel):
    """글 작성 요청. status가 없으면 draft."""
    title: str = Field(..., min_length=1, max_length=255, json_schema_extra={"example": "Hello World"})
    body: str = Field(..., min_length=1)
    status: Optional[ArticleStatus] = None
    tag_list: List[str] = Field(default_factory=list, alias="tagList")

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v):
        # 대소문자 구분 없이 받는다 (Published, DRAFT ...)
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ArticleUpdate(CustomModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    tag_list: List[str] = Field(default_factory=list, alias="tagList")


class RatingCreate(CustomModel):
    rating: int = Field(..., ge=1, le=5)


class ArticleAuthor(CustomModel):
    username: str
    bio: Optional[str] = None
    image: Optional[str] = None


class ArticleOut(CustomModel):
    title: str
    body: str
    description: str
    slug: str
    status: ArticleStatus
    tag_list: List[str] = Field(default_factory=list, alias="tagList")
    read_time: int = Field(..., alias="readTime")
    ratings: float = 0
    author: Optional[ArticleAuthor] = None
    likes: Optional[int] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class ArticleResponse(CustomModel):
    status: int
    article: ArticleOut


class ArticleListResponse(CustomModel):
    status: int = 200
    articles: List[ArticleOut]
    articles_count: int = Field(..., alias="articlesCount")


class RatingResponse(CustomModel):
    status: int = 200
    data: ArticleOut


class ReactionResponse(CustomModel):
    status: int = 200
    message: str
    reaction: Optional[LikeStatus] = None
    likes: int
    dislikes: int
