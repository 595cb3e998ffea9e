import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import BadRequest, NotFound, ServerError, TokenInvalid
from ..users import service as user_service
from ..users.models import User
from .mailer import Mailer
from .models import BlacklistToken
from .oauth import SocialProfile
from .tokens import TokenService

logger = logging.getLogger(__name__)


async def authenticate_user(
    db: AsyncSession, tokens: TokenService, email: str, password: str
) -> Tuple[User, str]:
    """
    이메일/비밀번호로 인증하고 (사용자, access token)을 반환합니다.
    미가입 → NotFound, 미활성화/비밀번호 불일치 → BadRequest.
    """
    user = await user_service.get_user_by_email(email, db)
    if not user:
        raise NotFound(f"The User with email {email} is not registered")
    if not user.activated:
        raise BadRequest(f"The account with email {email} is not activated")
    if not user_service.verify_password(password, user.salt, user.hash):
        raise BadRequest("The password is not correct")

    token = tokens.create_access_token(user_id=user.id, email=user.email)
    logger.info(f"User logged in: id={user.id}")
    return user, token


async def send_activation_mail(mailer: Mailer, user: User) -> None:
    """가입 직후 백그라운드로 실행. 발송 실패가 가입 자체를 실패시키지는 않습니다."""
    try:
        await mailer.send_activation(name=user.username, user_id=user.id, email=user.email)
    except ServerError as e:
        logger.warning(f"Activation mail to {user.email} failed: {e}")


async def request_password_reset(
    db: AsyncSession, tokens: TokenService, mailer: Mailer, email: str
) -> str:
    user = await user_service.get_user_by_email(email, db)
    if not user:
        raise NotFound("email not found")

    token = tokens.create_reset_token(user.email)
    # 메일 API 호출 실패는 ServerError로 그대로 전파
    await mailer.send_password_reset(email=user.email, token=token)
    logger.info(f"Password reset requested for user id={user.id}")
    return token


async def reset_password(
    db: AsyncSession, tokens: TokenService, token: str, password: str, password2: str
) -> None:
    if password != password2:
        raise BadRequest("password not matching")
    email = tokens.verify_reset_token(token)
    await user_service.set_password(email, password, db)


async def is_token_revoked(token: str, db: AsyncSession) -> bool:
    result = await db.execute(select(BlacklistToken.id).where(BlacklistToken.token == token))
    return result.first() is not None


async def get_user_from_access_token(token: str, tokens: TokenService, db: AsyncSession) -> Optional[User]:
    """
    Access Token을 검증하고 해당 사용자를 반환합니다.
    서명/만료 오류, 폐기된 토큰, 타입 불일치, 사라진 사용자는 모두 None.
    """
    try:
        payload = tokens.verify(token)
    except TokenInvalid:
        return None
    if payload.get("type") != "access" or payload.get("id") is None:
        return None
    if await is_token_revoked(token, db):
        return None
    return await user_service.get_user_by_id(payload["id"], db)


async def logout(db: AsyncSession, tokens: TokenService, token: str) -> None:
    """토큰을 원래 만료 시각과 함께 폐기 목록에 넣습니다."""
    payload = tokens.verify(token)
    expires = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    db.add(BlacklistToken(token=token, expires=expires))
    await db.commit()
    logger.info(f"Token revoked (expires={expires.isoformat()})")


async def purge_expired_tokens(db: AsyncSession, *, now: Optional[datetime] = None) -> int:
    now = now or datetime.now(timezone.utc)
    result = await db.execute(delete(BlacklistToken).where(BlacklistToken.expires < now))
    await db.commit()
    logger.info(f"Purged {result.rowcount} expired blacklist tokens")
    return result.rowcount


async def social_login(db: AsyncSession, tokens: TokenService, profile: SocialProfile) -> Tuple[User, str, bool]:
    """
    소셜 프로필로 로그인/가입합니다. (사용자, 토큰, 새로 생성 여부)를 반환합니다.
    """
    user = await user_service.get_social_user(profile.provider, profile.id, db)
    created = False
    if user is None:
        if not profile.emails:
            raise BadRequest(f"{profile.provider} account has no email address")
        user = await user_service.create_social_user(
            db,
            provider=profile.provider,
            provider_id=profile.id,
            email=profile.emails[0],
            display_name=profile.display_name[:25],
        )
        created = True

    token = tokens.create_access_token(user_id=user.id, email=user.email)
    return user, token, created
