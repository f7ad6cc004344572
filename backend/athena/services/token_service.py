import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
import secrets


class TokenService:
    """Issues and validates the access/refresh JWTs used by the API"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 30,
        refresh_token_expire_days: int = 30
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=refresh_token_expire_days)

    def create_access_token(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "email": email,
            "type": "access",
            "exp": now + self.access_token_expire,
            "iat": now
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_refresh_token(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "email": email,
            "type": "refresh",
            "exp": now + self.refresh_token_expire,
            "iat": now,
            "jti": secrets.token_urlsafe(32)
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> Optional[Dict]:
        return self._verify(token, "access")

    def verify_refresh_token(self, token: str) -> Optional[Dict]:
        return self._verify(token, "refresh")

    def _verify(self, token: str, token_type: str) -> Optional[Dict]:
        """
        Decode a token and check its type.

        Args:
            token: Encoded JWT
            token_type: Expected value of the ``type`` claim

        Returns:
            Decoded payload if valid, None otherwise
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

        if payload.get("type") != token_type:
            return None
        return payload
