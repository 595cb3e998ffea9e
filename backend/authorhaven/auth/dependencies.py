from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from ..config import settings
from ..database import SessionDep
from ..exceptions import Unauthorized
from ..users.models import User
from ..auth import service as auth_service
from .mailer import Mailer
from .oauth import OAuthClient
from .tokens import TokenService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# 설정 객체는 프로세스 시작 시 한 번 만들어지고, 협력 객체에 참조로 전달됩니다.
# 테스트에서는 app.dependency_overrides 로 교체합니다.
@lru_cache
def get_token_service() -> TokenService:
    return TokenService(settings)

@lru_cache
def get_mailer() -> Mailer:
    return Mailer(settings)

@lru_cache
def get_oauth_client() -> OAuthClient:
    return OAuthClient(settings)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]
OAuthClientDep = Annotated[OAuthClient, Depends(get_oauth_client)]


async def get_current_user_from_access_token(
    db: SessionDep,
    tokens: TokenServiceDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    user = await auth_service.get_user_from_access_token(token=token, tokens=tokens, db=db)
    if user is None:
        raise Unauthorized("Could not validate credentials")
    return user


async def get_optional_user(
    db: SessionDep,
    tokens: TokenServiceDep,
    token: Optional[str] = Depends(optional_oauth2_scheme),
) -> Optional[User]:
    """공개 엔드포인트용: 토큰이 없거나 유효하지 않으면 익명으로 취급합니다."""
    if not token:
        return None
    return await auth_service.get_user_from_access_token(token=token, tokens=tokens, db=db)


CurrentUser = Depends(get_current_user_from_access_token)
OptionalUser = Depends(get_optional_user)
