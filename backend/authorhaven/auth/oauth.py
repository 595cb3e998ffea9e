"""
소셜 로그인 프로필 조회.

클라이언트가 제공자에게서 받은 access token을 넘기면 제공자 API로 프로필을
조회해 `SocialProfile` 형태로 정규화합니다. 핸드셰이크 자체는 클라이언트 몫입니다.
"""
import logging
from dataclasses import dataclass, field
from typing import List

import httpx

from ..config import Config
from ..exceptions import NotFound, ServerError, Unauthorized

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("google", "facebook")


@dataclass
class SocialProfile:
    id: str
    display_name: str
    provider: str
    emails: List[str] = field(default_factory=list)


class OAuthClient:
    def __init__(self, config: Config):
        self.google_url = config.GOOGLE_USERINFO_URL
        self.facebook_url = config.FACEBOOK_GRAPH_URL
        self.timeout = config.OAUTH_TIMEOUT_SECONDS

    async def fetch_profile(self, provider: str, access_token: str) -> SocialProfile:
        if provider not in SUPPORTED_PROVIDERS:
            raise NotFound(f"Unsupported provider: {provider}")

        if provider == "google":
            url, params = self.google_url, {}
        else:
            url, params = self.facebook_url, {"fields": "id,name,email"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"{provider} rejected access token: {e.response.status_code}")
            raise Unauthorized(f"Invalid {provider} access token")
        except httpx.HTTPError as e:
            logger.error(f"{provider} profile request failed: {e}")
            raise ServerError(f"Could not reach {provider}")

        return self._normalise(provider, data)

    @staticmethod
    def _normalise(provider: str, data: dict) -> SocialProfile:
        # google: sub/name/email, facebook: id/name/email
        provider_id = str(data.get("sub") or data.get("id") or "")
        if not provider_id:
            raise Unauthorized(f"{provider} profile has no id")
        email = data.get("email")
        return SocialProfile(
            id=provider_id,
            display_name=data.get("name") or provider_id,
            provider=provider,
            emails=[email] if email else [],
        )
