import logging
from typing import List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..articles import service as article_service
from ..exceptions import BadRequest, Conflict, NotFound
from ..users import service as user_service
from ..users.models import User
from .models import Subscription, SubscriptionKind

logger = logging.getLogger(__name__)


async def resolve_target(db: AsyncSession, slug_or_username: str) -> Tuple[SubscriptionKind, int]:
    """글 slug를 먼저 찾고, 없으면 사용자명으로 찾습니다."""
    article = await article_service.get_article_by_slug(db, slug_or_username)
    if article:
        return SubscriptionKind.ARTICLE, article.id
    user = await user_service.get_user_by_username(slug_or_username, db)
    if user:
        return SubscriptionKind.AUTHOR, user.id
    raise NotFound("resource not found")


async def get_subscribers(db: AsyncSession, kind: SubscriptionKind, target_id: int) -> List[int]:
    result = await db.execute(
        select(Subscription.user_id)
        .where(Subscription.kind == kind, Subscription.target_id == target_id)
        .order_by(Subscription.id)
    )
    return list(result.scalars().all())


async def subscribe(db: AsyncSession, user: User, slug_or_username: str) -> Tuple[SubscriptionKind, int]:
    kind, target_id = await resolve_target(db, slug_or_username)
    if user.id in await get_subscribers(db, kind, target_id):
        raise Conflict("you are already a subscriber")

    db.add(Subscription(kind=kind, target_id=target_id, user_id=user.id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("you are already a subscriber")
    logger.info(f"User {user.id} subscribed to {kind.value} {target_id}")
    return kind, target_id


async def unsubscribe(db: AsyncSession, user: User, slug_or_username: str) -> Tuple[SubscriptionKind, int]:
    """구독 해제는 대상이 없거나 구독자가 없어도 BadRequest로 응답합니다."""
    try:
        kind, target_id = await resolve_target(db, slug_or_username)
    except NotFound as e:
        raise BadRequest(e.message) from e
    subscribers = await get_subscribers(db, kind, target_id)
    if not subscribers:
        raise BadRequest("resource not found")
    if user.id not in subscribers:
        raise BadRequest("you are not a subscriber")

    await db.execute(
        delete(Subscription).where(
            Subscription.kind == kind,
            Subscription.target_id == target_id,
            Subscription.user_id == user.id,
        )
    )
    await db.commit()
    logger.info(f"User {user.id} unsubscribed from {kind.value} {target_id}")
    return kind, target_id
