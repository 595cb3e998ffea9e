import logging
import secrets
from typing import Optional, Tuple

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq

from ..exceptions import BadRequest, Conflict, NotFound
from .models import User as UserModel, follows
from .schema import UserCreate, UserUpdate, Profile

logger = logging.getLogger(__name__)

# PBKDF2-HMAC-SHA512, 1000회, 64바이트 출력 (기존 계정 해시와 호환)
PBKDF2_DIGEST = "sha512"
PBKDF2_ROUNDS = 1000
PBKDF2_KEYLEN = 64
SALT_BYTES = 16


def hash_password(password: str, salt: str) -> str:
    return pbkdf2_hmac(PBKDF2_DIGEST, password, salt, PBKDF2_ROUNDS, PBKDF2_KEYLEN).hex()


def make_credentials(password: str) -> Tuple[str, str]:
    """새 salt를 만들고 (salt, hash) 쌍을 반환합니다."""
    salt = secrets.token_hex(SALT_BYTES)
    return salt, hash_password(password, salt)


def verify_password(password: str, salt: Optional[str], stored_hash: Optional[str]) -> bool:
    # 소셜 계정은 로컬 자격 증명이 없음
    if not salt or not stored_hash:
        return False
    return consteq(hash_password(password, salt), stored_hash)


async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()

async def get_user_by_username(username: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.username == username))
    return result.scalar_one_or_none()


async def create_user(user_data: UserCreate, db: AsyncSession, *, activated: bool = False) -> UserModel:
    email = user_data.email.strip()
    username = user_data.username.strip()
    if await get_user_by_email(email, db):
        raise Conflict("the user with that email exists")
    if await get_user_by_username(username, db):
        raise Conflict("the user with that username exists")

    salt, hashed = make_credentials(user_data.password)
    db_user = UserModel(
        email=email,
        username=username,
        salt=salt,
        hash=hashed,
        activated=activated,
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        # 사전 조회와 커밋 사이에 같은 이메일/이름으로 가입한 경우
        await db.rollback()
        raise Conflict("the user with that email or username exists")
    await db.refresh(db_user)
    logger.info(f"User registered: id={db_user.id}, email={db_user.email}")
    return db_user


async def activate_user(user_id: int, db: AsyncSession) -> UserModel:
    """활성화 플래그를 true로 바꿉니다. 이미 활성화된 계정도 그대로 성공."""
    user = await get_user_by_id(user_id, db)
    if not user:
        raise NotFound("User not found")
    if not user.activated:
        user.activated = True
        await db.commit()
        await db.refresh(user)
        logger.info(f"User activated: id={user.id}")
    return user


async def set_password(email: str, password: str, db: AsyncSession) -> None:
    salt, hashed = make_credentials(password)
    result = await db.execute(
        update(UserModel).where(UserModel.email == email).values(salt=salt, hash=hashed)
    )
    if result.rowcount == 0:
        raise NotFound("User not found")
    await db.commit()
    logger.info(f"Password updated for {email}")


async def update_user(db: AsyncSession, db_user: UserModel, user_in: UserUpdate) -> UserModel:
    """None이 아닌 필드만 업데이트합니다."""
    update_data = user_in.model_dump(exclude_unset=True)

    if "username" in update_data:
        existing = await get_user_by_username(update_data["username"], db)
        if existing and existing.id != db_user.id:
            raise Conflict("Username already taken by another user")

    for field, value in update_data.items():
        setattr(db_user, field, value)

    await db.commit()
    await db.refresh(db_user)
    return db_user


async def get_social_user(provider: str, provider_id: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(
        select(UserModel).where(UserModel.provider == provider, UserModel.provider_id == provider_id)
    )
    return result.scalar_one_or_none()


async def create_social_user(
    db: AsyncSession,
    *,
    provider: str,
    provider_id: str,
    email: str,
    display_name: str,
) -> UserModel:
    existing = await get_user_by_email(email, db)
    if existing:
        via = existing.provider or "email and password"
        raise Conflict(f"{email} already exists, please login with {via}")

    # 표시 이름이 이미 쓰이고 있으면 제공자 ID로 구분
    username = display_name
    if await get_user_by_username(username, db):
        username = f"{display_name}-{provider_id}"

    db_user = UserModel(
        email=email,
        username=username,
        provider=provider,
        provider_id=provider_id,
        salt=None,
        hash=None,
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        # 대체 사용자명(또는 동시 가입한 이메일)도 이미 사용 중
        await db.rollback()
        raise Conflict(f"Could not create an account for {email}, the username {username} is taken")
    await db.refresh(db_user)
    logger.info(f"Social user registered: id={db_user.id}, provider={provider}")
    return db_user


async def is_following(follower_id: int, followed_id: int, db: AsyncSession) -> bool:
    result = await db.execute(
        select(follows.c.follower_id).where(
            follows.c.follower_id == follower_id,
            follows.c.followed_id == followed_id,
        )
    )
    return result.first() is not None


async def to_profile(user: UserModel, db: AsyncSession, viewer: Optional[UserModel] = None) -> Profile:
    following = viewer is not None and await is_following(viewer.id, user.id, db)
    return Profile(username=user.username, bio=user.bio, image=user.image, following=following)


async def get_profile(username: str, db: AsyncSession, viewer: Optional[UserModel] = None) -> Profile:
    user = await get_user_by_username(username, db)
    if not user:
        raise NotFound(f"User {username} not found")
    return await to_profile(user, db, viewer)


async def _follow_target(current_user: UserModel, username: str, db: AsyncSession) -> UserModel:
    target = await get_user_by_username(username, db)
    if not target:
        raise NotFound(f"User {username} not found")
    if target.id == current_user.id:
        raise BadRequest("You cannot follow yourself")
    return target


async def follow_user(current_user: UserModel, username: str, db: AsyncSession) -> Profile:
    target = await _follow_target(current_user, username, db)
    if not await is_following(current_user.id, target.id, db):
        await db.execute(insert(follows).values(follower_id=current_user.id, followed_id=target.id))
        await db.commit()
        logger.info(f"User {current_user.id} follows {target.id}")
    return await to_profile(target, db, current_user)


async def unfollow_user(current_user: UserModel, username: str, db: AsyncSession) -> Profile:
    target = await _follow_target(current_user, username, db)
    await db.execute(
        delete(follows).where(
            follows.c.follower_id == current_user.id,
            follows.c.followed_id == target.id,
        )
    )
    await db.commit()
    return await to_profile(target, db, current_user)
