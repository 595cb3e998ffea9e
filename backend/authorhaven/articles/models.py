# backend/authorhaven/articles/models.py
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Boolean, JSON,
    Enum as SQLEnum, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    # DB에는 이름(DRAFT)이 아니라 값(draft)을 저장
    return [member.value for member in enum_cls]


class ArticleStatus(str, PyEnum):
    DRAFT = "draft"
    PUBLISHED = "published"

class LikeStatus(str, PyEnum):
    LIKED = "liked"
    DISLIKED = "disliked"


class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (
        Index("ix_articles_author_status_deleted", "author_id", "status", "deleted"),
        Index("ix_articles_status_deleted", "status", "deleted"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    description = Column(String(100), nullable=False)  # 본문 앞 100자
    slug = Column(String(80), unique=True, nullable=False, index=True)
    status = Column(
        SQLEnum(ArticleStatus, name="articlestatus", values_callable=_enum_values),
        default=ArticleStatus.DRAFT,
        nullable=False,
    )
    deleted = Column(Boolean, default=False, nullable=False)  # soft delete 플래그
    tag_list = Column(JSON, nullable=False, default=list)
    read_time = Column(Integer, nullable=False, default=1)     # 분 단위
    ratings = Column(JSON, nullable=True)                      # 누적 평점 이력 (append-only)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # 낙관적 동시성 제어: 평점 append 경합 시 StaleDataError
    version_id = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    author = relationship("User", lazy="joined")

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"Article(id={self.id}, slug={self.slug!r}, status={self.status}, deleted={self.deleted})"
    def __str__(self) -> str:
        return f"{self.title} ({self.slug})"


class Like(Base):
    """글에 대한 사용자 반응 (좋아요/싫어요). 사용자당 글 하나에 하나."""
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="uq_likes_user_article"),
        Index("ix_likes_article_status", "article_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(LikeStatus, name="likestatus", values_callable=_enum_values), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"Like(user_id={self.user_id}, article_id={self.article_id}, status={self.status})"
