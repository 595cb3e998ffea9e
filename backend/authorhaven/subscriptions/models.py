# backend/authorhaven/subscriptions/models.py
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum as SQLEnum, UniqueConstraint, Index
from sqlalchemy.sql import func
from ..database import Base


class SubscriptionKind(str, PyEnum):
    AUTHOR = "author"
    ARTICLE = "article"


class Subscription(Base):
    """
    구독 대상은 (kind, target_id)로 구분합니다. kind가 author면 target_id는 users.id,
    article이면 articles.id. 같은 대상에 대한 행들의 user_id 집합이 구독자 목록입니다.
    """
    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("kind", "target_id", "user_id", name="uq_subscriptions_kind_target_user"),
        Index("ix_subscriptions_kind_target", "kind", "target_id"),
    )

    id = Column(Integer, primary_key=True)
    kind = Column(
        SQLEnum(SubscriptionKind, name="subscriptionkind", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    target_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"Subscription(kind={self.kind}, target_id={self.target_id}, user_id={self.user_id})"
