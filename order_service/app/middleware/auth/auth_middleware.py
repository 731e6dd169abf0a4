from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.setting import get_settings
from ...utils.jwt_handler import JWTHandler
from ...utils.logging import setup_order_logging as setup_logging

logger = setup_logging("order_service.auth", log_level=get_settings().LOG_LEVEL)


class OrderServiceAuthMiddleware(BaseHTTPMiddleware):
    """Attach the caller identity from a bearer token to ``request.state``"""

    def __init__(
        self,
        app: Any,
        exclude_paths: Optional[list[str]] = None,
        jwt_handler: Optional[JWTHandler] = None,
    ):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/docs", "/openapi.json"]
        settings = get_settings()
        self.jwt_handler = jwt_handler or JWTHandler(
            secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )

    async def dispatch(self, request: Request, call_next):
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        authorization = request.headers.get("Authorization", "")
        if not authorization.lower().startswith("bearer "):
            return await call_next(request)

        try:
            token_data = self.jwt_handler.decode_token(authorization[7:].strip())
        except ValueError as e:
            logger.warning(
                "Rejected bearer token",
                extra={"path": request.url.path, "reason": str(e)},
            )
            return JSONResponse(
                status_code=401,
                content={
                    "error": {
                        "type": "authentication_error",
                        "message": "Invalid or expired token",
                    }
                },
            )

        request.state.user_id = token_data.user_id
        request.state.user_roles = token_data.roles
        request.state.user_role = token_data.roles[0] if token_data.roles else "user"
        return await call_next(request)


class AuthenticatedUser:
    def __init__(self, required_role: Optional[str] = None):
        self.required_role = required_role

    async def __call__(self, request: Request) -> str:
        user_id = getattr(request.state, "user_id", None)
        if not user_id:
            raise HTTPException(status_code=401, detail="Authentication required")

        if self.required_role and self.required_role not in getattr(
            request.state, "user_roles", []
        ):
            raise HTTPException(
                status_code=403, detail=f"Required role: {self.required_role}"
            )
        return user_id


def setup_order_auth_middleware(
    app: FastAPI, exclude_paths: Optional[list[str]] = None
) -> None:
    app.add_middleware(OrderServiceAuthMiddleware, exclude_paths=exclude_paths)
    logger.info("Order Service authentication middleware configured")


authenticated_user = AuthenticatedUser()
admin_user = AuthenticatedUser(required_role="admin")
