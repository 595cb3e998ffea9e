# backend/authorhaven/auth/models.py
from sqlalchemy import Column, Integer, Text, DateTime, Index
from sqlalchemy.sql import func
from ..database import Base


class BlacklistToken(Base):
    """로그아웃으로 폐기된 JWT. 여기에 있는 토큰은 서명이 유효해도 거부됩니다."""
    __tablename__ = "blacklist_tokens"
    __table_args__ = (
        Index("ix_blacklist_tokens_expires", "expires"),
    )

    id = Column(Integer, primary_key=True, index=True)
    token = Column(Text, unique=True, nullable=False)
    expires = Column(DateTime(timezone=True), nullable=False)  # 원래 토큰의 만료 시각
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"BlacklistToken(id={self.id}, expires={self.expires})"
