import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..articles import service as article_service
from ..articles.models import Article
from ..exceptions import Conflict, NotFound, Unauthorized
from ..users.models import User
from .models import Bookmark
from .schemas import BookmarkAuthor, BookmarkCreated, BookmarkedArticle

logger = logging.getLogger(__name__)


def _to_bookmarked(article: Article, author: User) -> BookmarkedArticle:
    return BookmarkedArticle(
        title=article.title,
        slug=article.slug,
        author=BookmarkAuthor(username=author.username, image=author.image),
    )


async def _find(db: AsyncSession, user_id: int, article_id: int) -> Optional[Bookmark]:
    result = await db.execute(
        select(Bookmark).where(Bookmark.user_id == user_id, Bookmark.article_id == article_id)
    )
    return result.scalar_one_or_none()


async def create_bookmark(db: AsyncSession, user: Optional[User], slug: str) -> tuple[str, BookmarkCreated]:
    """북마크를 만들고 (메시지, 글 요약)을 반환합니다."""
    if user is None:
        raise Unauthorized("Please first login to bookmark this article")
    article = await article_service.get_article_by_slug(db, slug)
    if not article:
        raise NotFound("The article your trying to bookmark does not exist")
    if await _find(db, user.id, article.id):
        raise Conflict("You have already bookmarked this article")

    db.add(Bookmark(user_id=user.id, article_id=article.id))
    try:
        await db.commit()
    except IntegrityError:
        # 동시 요청이 먼저 같은 쌍을 만든 경우 (unique 제약)
        await db.rollback()
        raise Conflict("You have already bookmarked this article")

    logger.info(f"Bookmark created: user_id={user.id}, article_id={article.id}")
    message = f"Article from {article.author.username} has been bookmarked"
    return message, BookmarkCreated(title=article.title, body=article.body, description=article.description)


async def list_bookmarks(db: AsyncSession, user: User) -> List[BookmarkedArticle]:
    result = await db.execute(
        select(Article, User)
        .join(Bookmark, Bookmark.article_id == Article.id)
        .join(User, User.id == Article.author_id)
        .where(Bookmark.user_id == user.id, Article.deleted.is_(False))
        .order_by(Bookmark.id)
    )
    return [_to_bookmarked(article, author) for article, author in result.unique().all()]


async def get_bookmark(db: AsyncSession, user: User, slug: str) -> BookmarkedArticle:
    result = await db.execute(
        select(Article, User)
        .join(Bookmark, Bookmark.article_id == Article.id)
        .join(User, User.id == Article.author_id)
        .where(Bookmark.user_id == user.id, Article.slug == slug, Article.deleted.is_(False))
    )
    row = result.unique().first()
    if row is None:
        raise NotFound("Article not found in your bookmarks")
    article, author = row
    return _to_bookmarked(article, author)


async def delete_bookmark(db: AsyncSession, user: User, slug: str) -> None:
    article = await article_service.require_article(db, slug)
    result = await db.execute(
        delete(Bookmark).where(Bookmark.user_id == user.id, Bookmark.article_id == article.id)
    )
    if result.rowcount == 0:
        raise Unauthorized("No bookmark to delete")
    await db.commit()
    logger.info(f"Bookmark cleared: user_id={user.id}, article_id={article.id}")
