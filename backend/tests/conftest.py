import os
import sys
from pathlib import Path
import pytest

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# 테스트용 환경 변수 세팅 (authorhaven 모듈 임포트 전에 적용)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CORS_ORIGINS", "*")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# sys.path에 backend 추가하여 'authorhaven' 패키지 검색 가능하게 함
backend_path = Path(__file__).resolve().parents[1]
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from authorhaven.main import app
from authorhaven.database import Base
from authorhaven.database import get_db as real_get_db
from authorhaven.auth.dependencies import get_mailer, get_oauth_client, get_token_service
from authorhaven.auth.oauth import SocialProfile
from authorhaven.exceptions import Unauthorized
from authorhaven.users import service as user_service
from authorhaven.users.schema import UserCreate


class FakeMailer:
    """보낸 메일을 기록만 하는 Mailer 대역."""

    def __init__(self):
        self.activations = []
        self.resets = []

    async def send_activation(self, *, name: str, user_id: int, email: str) -> None:
        self.activations.append({"name": name, "user_id": user_id, "email": email})

    async def send_password_reset(self, *, email: str, token: str) -> None:
        self.resets.append({"email": email, "token": token})


class FakeOAuthClient:
    """access token 문자열을 미리 등록한 프로필로 매핑."""

    def __init__(self):
        self.profiles = {}

    async def fetch_profile(self, provider: str, access_token: str) -> SocialProfile:
        profile = self.profiles.get((provider, access_token))
        if profile is None:
            raise Unauthorized(f"Invalid {provider} access token")
        return profile


@pytest.fixture()
async def test_engine():
    # 메모리 SQLite, 테스트마다 새 스키마
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def oauth_client():
    return FakeOAuthClient()


@pytest.fixture()
def tokens():
    return get_token_service()


@pytest.fixture(autouse=True)
async def override_dependencies(db, mailer, oauth_client):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db, tokens):
    """활성화된 사용자를 만들고 (user, Authorization 헤더)를 반환하는 팩토리."""
    async def _make(username: str = "berra", email: str | None = None, password: str = "testtest4"):
        user = await user_service.create_user(
            UserCreate(email=email or f"{username}@tests.com", username=username, password=password),
            db,
            activated=True,
        )
        token = tokens.create_access_token(user_id=user.id, email=user.email)
        return user, {"Authorization": f"Bearer {token}"}
    return _make
