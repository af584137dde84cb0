import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt

from clubify.core.config import (
    JWT_SECRET_KEY,
    JWT_ALGORITHM,
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
)
from clubify.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class JWTManager:
    """Issues and verifies HS256 bearer tokens identifying a user"""

    def __init__(
        self,
        secret_key: str = None,
        algorithm: str = None,
        access_token_expire_minutes: int = None,
    ):
        self.secret_key = secret_key or JWT_SECRET_KEY
        self.algorithm = algorithm or JWT_ALGORITHM
        self.access_token_expire_minutes = (
            access_token_expire_minutes or JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    def create_access_token(
        self, user_id: int, extra_data: Dict[str, Any] = None
    ) -> str:
        """
        Create an access token for a user

        Args:
            user_id: users.id, stored in `sub`
            extra_data: Additional claims

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "exp": now + timedelta(minutes=self.access_token_expire_minutes),
            "iat": now,
            "type": "access_token",
        }
        if extra_data:
            payload.update(extra_data)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug(f"JWT token created for user: {user_id}")
        return token

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and verify a token

        Raises:
            AuthenticationError: invalid, expired or wrong token type
        """
        if not self.secret_key:
            logger.error("JWT_SECRET_KEY is not configured")
            raise AuthenticationError("Token validation failed")

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token has expired")
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            logger.warning("Invalid JWT token provided")
            raise AuthenticationError("Invalid token")

        if payload.get("type") != "access_token":
            raise AuthenticationError("Invalid token type")

        return payload

    def get_user_id(self, token: str) -> int:
        """Verified `sub` claim as an integer user id"""
        payload = self.decode_token(token)
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Invalid token subject")


jwt_manager = JWTManager()
