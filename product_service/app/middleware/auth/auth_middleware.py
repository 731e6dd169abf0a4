from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.setting import get_settings
from ...utils.jwt_handler import JWTHandler
from ...utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.auth")

DEFAULT_EXCLUDE_PATHS = ["/health", "/docs", "/redoc", "/openapi.json"]


class ProductServiceAuthMiddleware(BaseHTTPMiddleware):
    """
    Resolves the caller from a bearer token or auth cookie.

    Anonymous requests pass through (catalog reads are public); role checks
    happen in the ``AuthenticatedUser`` dependency. A token that is present
    but invalid is rejected here with 401.
    """

    def __init__(
        self,
        app: Any,
        exclude_paths: Optional[list[str]] = None,
        jwt_handler: Optional[JWTHandler] = None,
    ):
        super().__init__(app)
        self.exclude_paths = exclude_paths or list(DEFAULT_EXCLUDE_PATHS)
        if jwt_handler is None:
            settings = get_settings()
            jwt_handler = JWTHandler(
                secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM
            )
        self.jwt_handler = jwt_handler

    def _should_skip_auth(self, path: str) -> bool:
        return any(
            path == excluded or path.startswith(excluded)
            for excluded in self.exclude_paths
        )

    @staticmethod
    def _extract_token(request: Request) -> Optional[str]:
        authorization = request.headers.get("Authorization", "")
        if authorization.lower().startswith("bearer "):
            token = authorization[7:].strip()
        else:
            token = request.cookies.get("auth_token") or request.cookies.get(
                "access_token"
            )
        if not token or token in ("null", "undefined"):
            return None
        return token

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if self._should_skip_auth(request.url.path):
            return await call_next(request)

        token = self._extract_token(request)
        if token is None:
            return await call_next(request)

        correlation_id = getattr(request.state, "correlation_id", None)
        try:
            token_data = self.jwt_handler.decode_token(token)
        except ValueError as e:
            logger.warning(
                f"Authentication failed: {e}",
                extra={
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                    "method": request.method,
                    "event_type": "auth_failed",
                },
            )
            return JSONResponse(
                status_code=401,
                content={
                    "error": {
                        "type": "authentication_error",
                        "message": "Authentication required",
                        "correlation_id": correlation_id,
                        "details": {"reason": str(e)},
                    }
                },
            )

        request.state.user_id = token_data.user_id
        request.state.user_role = token_data.primary_role
        request.state.user_roles = token_data.roles
        return await call_next(request)


class AuthenticatedUser:
    """Dependency returning the caller's user id, enforcing a role if given"""

    def __init__(self, required_role: Optional[str] = None):
        self.required_role = required_role

    async def __call__(self, request: Request) -> str:
        user_id = getattr(request.state, "user_id", None)
        roles = getattr(request.state, "user_roles", None) or []

        if not user_id:
            raise HTTPException(status_code=401, detail="Authentication required")

        if self.required_role and self.required_role not in roles:
            logger.warning(
                "Access denied: missing required role",
                extra={
                    "user_id": user_id,
                    "required_role": self.required_role,
                    "path": request.url.path,
                    "event_type": "authorization_failed",
                },
            )
            raise HTTPException(
                status_code=403, detail=f"Required role: {self.required_role}"
            )

        return user_id


def setup_product_auth_middleware(
    app: FastAPI, exclude_paths: Optional[list[str]] = None
) -> None:
    """Setup authentication middleware for the Product Service."""
    app.add_middleware(ProductServiceAuthMiddleware, exclude_paths=exclude_paths)
    logger.info(
        "Product Service authentication middleware configured",
        extra={
            "excluded_paths": exclude_paths or DEFAULT_EXCLUDE_PATHS,
            "event_type": "auth_middleware_setup",
        },
    )


authenticated_user = AuthenticatedUser()
admin_user = AuthenticatedUser(required_role="admin")
