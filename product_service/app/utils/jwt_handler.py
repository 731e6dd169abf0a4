"""
JWT Handler for Product Service

Validates access tokens issued by the user service. Tokens carry the
caller's roles; catalog writes and sync administration require ``admin``.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel


class TokenData(BaseModel):
    """Decoded access token claims"""

    user_id: str
    email: str = ""
    username: str = ""
    roles: List[str] = []
    expires_at: datetime

    @property
    def primary_role(self) -> str:
        return self.roles[0] if self.roles else "user"


class JWTHandler:
    """Encodes and validates HS-signed access tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def encode_token(
        self, payload: Dict[str, Any], expires_delta: Optional[timedelta] = None
    ) -> str:
        """Sign ``payload`` as an access token (default lifetime 30 minutes)"""
        now = datetime.now(timezone.utc)
        to_encode = {
            **payload,
            "exp": now + (expires_delta or timedelta(minutes=30)),
            "iat": now,
            "type": "access",
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenData:
        """
        Decode and validate a JWT token.

        Raises:
            ValueError: If the token is invalid, expired, or lacks ``user_id``/``exp``
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ValueError("Token has expired")
        except JWTError as e:
            raise ValueError(f"Token validation failed: {e}")

        user_id = payload.get("user_id")
        exp = payload.get("exp")
        if not user_id or not exp:
            raise ValueError("Invalid token payload: missing user_id or exp")

        return TokenData(
            user_id=str(user_id),
            email=payload.get("email", ""),
            username=payload.get("username", ""),
            roles=payload.get("roles", []),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
