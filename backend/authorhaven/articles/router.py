# backend/authorhaven/articles/router.py
from fastapi import APIRouter, Query, status

from ..auth.dependencies import CurrentUser
from ..database import SessionDep
from ..models import StatusMessage
from ..users.models import User
from .models import ArticleStatus, LikeStatus
from .schemas import (
    ArticleCreate,
    ArticleUpdate,
    ArticleResponse,
    ArticleListResponse,
    RatingCreate,
    RatingResponse,
    ReactionResponse,
)
from . import service


router = APIRouter(prefix="/articles", tags=["articles"])

PageLimit = Query(20, ge=1, le=100)
PageOffset = Query(0, ge=0)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(body: ArticleCreate, db: SessionDep, current_user: User = CurrentUser):
    article = await service.create_article(db, current_user, body)
    return ArticleResponse(
        status=status.HTTP_201_CREATED,
        article=service.to_article_out(article, author=service.to_author(current_user)),
    )


@router.get("/feed", response_model=ArticleListResponse)
async def get_feed(db: SessionDep, limit: int = PageLimit, offset: int = PageOffset):
    articles = await service.list_public_feed(db, limit=limit, offset=offset)
    return ArticleListResponse(articles=articles, articles_count=len(articles))


@router.get("/published", response_model=ArticleListResponse)
async def get_published_articles(
    db: SessionDep,
    limit: int = PageLimit,
    offset: int = PageOffset,
    current_user: User = CurrentUser,
):
    articles = await service.list_by_author_and_status(
        db, current_user, ArticleStatus.PUBLISHED, limit=limit, offset=offset
    )
    return ArticleListResponse(articles=articles, articles_count=len(articles))


@router.get("/drafts", response_model=ArticleListResponse)
async def get_draft_articles(
    db: SessionDep,
    limit: int = PageLimit,
    offset: int = PageOffset,
    current_user: User = CurrentUser,
):
    articles = await service.list_by_author_and_status(
        db, current_user, ArticleStatus.DRAFT, limit=limit, offset=offset
    )
    return ArticleListResponse(articles=articles, articles_count=len(articles))


@router.get("/{slug}", response_model=ArticleResponse)
async def view_article(slug: str, db: SessionDep):
    article = await service.view_article(db, slug)
    return ArticleResponse(status=status.HTTP_200_OK, article=article)


@router.put("/{slug}", response_model=ArticleResponse)
async def update_article(slug: str, body: ArticleUpdate, db: SessionDep, current_user: User = CurrentUser):
    article = await service.update_article(db, current_user, slug, body)
    return ArticleResponse(
        status=status.HTTP_200_OK,
        article=service.to_article_out(article, author=service.to_author(current_user)),
    )


@router.delete("/{slug}", response_model=StatusMessage)
async def delete_article(slug: str, db: SessionDep, current_user: User = CurrentUser):
    await service.soft_delete_article(db, current_user, slug)
    return StatusMessage(status=status.HTTP_200_OK, message="Article deleted successfully")


@router.post("/{slug}/rate", response_model=RatingResponse)
async def rate_article(slug: str, body: RatingCreate, db: SessionDep, current_user: User = CurrentUser):
    article = await service.rate_article(db, slug, body.rating)
    return RatingResponse(data=service.to_article_out(article))


async def _react(slug: str, reaction: LikeStatus, db, current_user: User) -> ReactionResponse:
    final = await service.react(db, current_user, slug, reaction)
    article = await service.require_article(db, slug)
    likes = await service.count_reactions(db, article.id, LikeStatus.LIKED)
    dislikes = await service.count_reactions(db, article.id, LikeStatus.DISLIKED)
    message = f"Article {final.value}" if final else "Reaction removed"
    return ReactionResponse(message=message, reaction=final, likes=likes, dislikes=dislikes)


@router.post("/{slug}/like", response_model=ReactionResponse)
async def like_article(slug: str, db: SessionDep, current_user: User = CurrentUser):
    return await _react(slug, LikeStatus.LIKED, db, current_user)


@router.post("/{slug}/dislike", response_model=ReactionResponse)
async def dislike_article(slug: str, db: SessionDep, current_user: User = CurrentUser):
    return await _react(slug, LikeStatus.DISLIKED, db, current_user)
