import logging
import math
import re
import secrets
from typing import List, Optional, Sequence

from sqlalchemy import func, select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions import Conflict, Forbidden, NotFound, ServerError
from ..users.models import User
from .models import Article, ArticleStatus, Like, LikeStatus
from .schemas import ArticleAuthor, ArticleCreate, ArticleOut, ArticleUpdate

logger = logging.getLogger(__name__)

SLUG_PREFIX_LENGTH = 40
SLUG_SUFFIX_BYTES = 5           # hex 10자
DESCRIPTION_LENGTH = 100
WORDS_PER_MINUTE = 200
RATE_MAX_RETRIES = 3

_SLUG_UNSAFE = re.compile(r"[^\w-]+")


def make_slug(title: str) -> str:
    """
    제목 → slug. 소문자화, 공백은 하이픈, 앞 40자 + 랜덤 hex 10자.
    같은 제목이어도 suffix 덕분에 서로 다른 slug가 나옵니다.
    """
    prefix = _SLUG_UNSAFE.sub("", title.lower().replace(" ", "-"))[:SLUG_PREFIX_LENGTH]
    return f"{prefix}{secrets.token_hex(SLUG_SUFFIX_BYTES)}"


def make_description(body: str) -> str:
    return body[:DESCRIPTION_LENGTH]


def read_time(body: str) -> int:
    """본문 단어 수 기준 읽기 시간(분), 최소 1분."""
    words = len(body.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def average_rating(ratings: Optional[Sequence[int]]) -> float:
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 2)


def to_author(user: Optional[User], *, with_bio: bool = True) -> Optional[ArticleAuthor]:
    if user is None:
        return None
    return ArticleAuthor(username=user.username, bio=user.bio if with_bio else None, image=user.image)


def to_article_out(article: Article, *, author: Optional[ArticleAuthor] = None, likes: Optional[int] = None) -> ArticleOut:
    return ArticleOut(
        title=article.title,
        body=article.body,
        description=article.description,
        slug=article.slug,
        status=article.status,
        tag_list=list(article.tag_list or []),
        read_time=article.read_time,
        ratings=average_rating(article.ratings),
        author=author,
        likes=likes,
        created_at=article.created_at,
        updated_at=article.updated_at,
    )


def _active():
    return Article.deleted.is_(False)


def _select_articles(*conditions):
    # identity map에 남은 객체도 최신 행 값으로 덮어씀
    return select(Article).where(*conditions, _active()).execution_options(populate_existing=True)


async def get_article_by_slug(db: AsyncSession, slug: str) -> Optional[Article]:
    result = await db.execute(_select_articles(Article.slug == slug))
    return result.unique().scalar_one_or_none()


async def require_article(db: AsyncSession, slug: str) -> Article:
    article = await get_article_by_slug(db, slug)
    if not article:
        raise NotFound("No article found for this slug")
    return article


def _require_author(article: Article, user: User) -> None:
    if article.author_id != user.id:
        raise Forbidden("Only the author can modify this article")


async def create_article(db: AsyncSession, author: User, data: ArticleCreate) -> Article:
    article = Article(
        title=data.title,
        body=data.body,
        author_id=author.id,
        slug=make_slug(data.title),
        description=make_description(data.body),
        status=data.status or ArticleStatus.DRAFT,
        tag_list=list(data.tag_list),
        read_time=read_time(data.body),
    )
    db.add(article)
    await db.commit()
    logger.info(f"Article created: slug={article.slug}, author_id={author.id}, status={article.status.value}")
    return article


async def update_article(db: AsyncSession, user: User, old_slug: str, data: ArticleUpdate) -> Article:
    """
    제목/본문으로 slug, description, 읽기 시간을 다시 계산해 갱신합니다.
    이전 slug는 갱신 즉시 더 이상 조회되지 않습니다.
    """
    current = await require_article(db, old_slug)
    _require_author(current, user)

    new_slug = make_slug(data.title)
    result = await db.execute(
        update(Article)
        .where(Article.slug == old_slug, _active())
        .values(
            title=data.title,
            body=data.body,
            slug=new_slug,
            description=make_description(data.body),
            tag_list=list(data.tag_list),
            read_time=read_time(data.body),
            version_id=Article.version_id + 1,
        )
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Article not found, please create a new article instead")
    await db.commit()

    updated = await get_article_by_slug(db, new_slug)
    if not updated:
        raise NotFound("Article not found, please create a new article instead")
    logger.info(f"Article updated: {old_slug} -> {new_slug}")
    return updated


async def soft_delete_article(db: AsyncSession, user: User, slug: str) -> None:
    current = await require_article(db, slug)
    _require_author(current, user)

    result = await db.execute(
        update(Article)
        .where(Article.slug == slug, _active())
        .values(deleted=True, version_id=Article.version_id + 1)
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("No article found for this slug")
    await db.commit()
    logger.info(f"Article soft-deleted: slug={slug}")


async def list_by_author_and_status(
    db: AsyncSession,
    author: User,
    status: ArticleStatus,
    *,
    limit: int = 20,
    offset: int = 0,
) -> List[ArticleOut]:
    result = await db.execute(
        _select_articles(Article.author_id == author.id, Article.status == status)
        .order_by(Article.id.desc())
        .offset(offset)
        .limit(limit)
    )
    author_out = to_author(author)
    return [to_article_out(a, author=author_out) for a in result.unique().scalars().all()]


async def list_public_feed(db: AsyncSession, *, limit: int = 20, offset: int = 0) -> List[ArticleOut]:
    result = await db.execute(
        _select_articles(Article.status == ArticleStatus.PUBLISHED)
        .order_by(Article.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return [to_article_out(a, author=to_author(a.author)) for a in result.unique().scalars().all()]


async def count_reactions(db: AsyncSession, article_id: int, status: LikeStatus) -> int:
    result = await db.execute(
        select(func.count(Like.id)).where(Like.article_id == article_id, Like.status == status)
    )
    return result.scalar_one()


async def view_article(db: AsyncSession, slug: str) -> ArticleOut:
    article = await require_article(db, slug)
    likes = await count_reactions(db, article.id, LikeStatus.LIKED)
    return to_article_out(article, author=to_author(article.author, with_bio=False), likes=likes)


async def rate_article(db: AsyncSession, slug: str, rating: int) -> Article:
    """
    평점을 이력에 append 합니다. 버전 컬럼으로 경합을 감지하고
    다른 요청이 먼저 커밋했다면 최신 이력을 다시 읽어 재시도합니다.
    """
    for attempt in range(1, RATE_MAX_RETRIES + 1):
        article = await get_article_by_slug(db, slug)
        if not article:
            raise NotFound("Article not found")
        article.ratings = [*(article.ratings or []), rating]
        try:
            await db.commit()
        except StaleDataError:
            await db.rollback()
            logger.warning(f"Concurrent rating on {slug}, retrying ({attempt}/{RATE_MAX_RETRIES})")
            continue
        logger.info(f"Article rated: slug={slug}, rating={rating}, votes={len(article.ratings)}")
        return article
    raise ServerError("Server failed to handle your request")


async def react(db: AsyncSession, user: User, slug: str, status: LikeStatus) -> Optional[LikeStatus]:
    """
    좋아요/싫어요를 기록합니다. 같은 반응을 다시 보내면 취소, 다른 반응이면 전환.
    최종 반응(취소 시 None)을 반환합니다.
    """
    article = await require_article(db, slug)
    result = await db.execute(
        select(Like).where(Like.user_id == user.id, Like.article_id == article.id)
    )
    existing = result.scalar_one_or_none()

    if existing is None:
        db.add(Like(user_id=user.id, article_id=article.id, status=status))
        final = status
    elif existing.status == status:
        await db.execute(delete(Like).where(Like.id == existing.id))
        final = None
    else:
        existing.status = status
        final = status
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Your reaction on this article was already recorded")
    return final
