# backend/authorhaven/users/models.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Table, UniqueConstraint
from sqlalchemy.sql import func
from ..database import Base

# 팔로우 관계 (follower -> followed), User <-> User 다대다
follows = Table(
    "follows",
    Base.metadata,
    Column("follower_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("followed_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_users_provider_provider_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    # PBKDF2 해시와 사용자별 salt (hex). 소셜 계정은 둘 다 NULL
    salt = Column(String(64))
    hash = Column(String(128))
    activated = Column(Boolean, default=False, nullable=False)
    provider = Column(String(30))       # google, facebook
    provider_id = Column(String(100))   # 소셜 제공자 측 사용자 ID
    bio = Column(Text)
    image = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r}, email={self.email!r}, activated={self.activated})"
    def __str__(self) -> str:
        return f"{self.username} ({self.email})"
