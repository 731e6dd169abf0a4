"""
JWT verification for Order Service.

The order service never issues tokens; it only checks access tokens minted
by the user service and exposes their claims.
"""

from datetime import datetime, timezone

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel


class TokenData(BaseModel):
    user_id: str
    roles: list[str] = []
    permissions: list[str] = []
    expires_at: datetime


class JWTHandler:
    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def decode_token(self, token: str) -> TokenData:
        """
        Decode and validate JWT token.

        Raises:
            ValueError: If token is invalid, expired, or malformed
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ValueError("Token has expired")
        except JWTError as e:
            raise ValueError(f"Token validation failed: {e}")

        if payload.get("type", "access") != "access":
            raise ValueError("Only access tokens are accepted")

        user_id = payload.get("user_id")
        exp = payload.get("exp")
        if not user_id or not exp:
            raise ValueError("Invalid token payload: missing user_id or exp")

        return TokenData(
            user_id=str(user_id),
            roles=payload.get("roles", []),
            permissions=payload.get("permissions", []),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
