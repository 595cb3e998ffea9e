import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt, JWTError

from ..config import Config
from ..exceptions import TokenInvalid


class TokenService:
    """
    JWT 서명/검증 담당. 설정 객체를 주입받아 사용하며
    프로세스 환경 변수를 직접 읽지 않습니다.
    """

    def __init__(self, config: Config):
        self.secret = config.JWT_SECRET_KEY
        self.algorithm = config.JWT_ALGORITHM
        self.access_ttl = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.reset_ttl = timedelta(hours=config.RESET_TOKEN_EXPIRE_HOURS)

    def sign(self, payload: Dict[str, Any], expires_in: timedelta) -> str:
        to_encode = dict(payload)
        to_encode["exp"] = datetime.now(timezone.utc) + expires_in
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """서명과 만료를 검사하고 payload를 반환합니다. 실패 시 TokenInvalid."""
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise TokenInvalid(f"{e}, go to reset again") from e

    def create_access_token(self, *, user_id: int, email: str) -> str:
        # jti: 같은 초에 발급된 토큰도 서로 구분되어 개별 폐기 가능
        payload = {"id": user_id, "email": email, "type": "access", "jti": uuid.uuid4().hex}
        return self.sign(payload, self.access_ttl)

    def create_reset_token(self, email: str) -> str:
        return self.sign({"email": email, "type": "reset"}, self.reset_ttl)

    def verify_reset_token(self, token: str) -> str:
        payload = self.verify(token)
        email = payload.get("email")
        if payload.get("type") != "reset" or not email:
            raise TokenInvalid("Token is not a password reset token")
        return email
