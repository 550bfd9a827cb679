"""JWT Bearer authentication middleware."""

import logging

from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from kitchzero.config import settings
from kitchzero.logging_config import bind_request_context

logger = logging.getLogger(__name__)

# Paths that do not require authentication
_PUBLIC_PATHS = {
    "/api/v1/health",
    "/api/v1/health/ready",
    "/docs",
    "/openapi.json",
    "/redoc",
}

_ANONYMOUS = {"sub": "anonymous", "role": None, "tenant_id": None, "branch_id": None}


def _decode_jwt(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise ValueError(f"Invalid token: {exc}") from exc


def create_access_token(sub: str, role: str, tenant_id: str | None, branch_id: str | None = None, **extra) -> str:
    """Sign an access token carrying the claims this API reads."""
    claims = {
        "sub": sub,
        "role": role,
        "tenant_id": tenant_id,
        "branch_id": branch_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "type": "access",
        **extra,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


class AuthMiddleware(BaseHTTPMiddleware):
    """Validate the Bearer token and attach user claims to request.state."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path

        if path in _PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc"):
            request.state.user = dict(_ANONYMOUS)
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith("Bearer "):
            user = self._validate_jwt(auth_header[7:])
            request.state.user = user
            if "_auth_error" not in user:
                bind_request_context(
                    getattr(request.state, "trace_id", "unknown"),
                    user_id=user["sub"],
                    tenant_id=user["tenant_id"],
                )
        else:
            # No auth provided; individual routes enforce auth as needed
            request.state.user = dict(_ANONYMOUS)
        return await call_next(request)

    @staticmethod
    def _validate_jwt(token: str) -> dict:
        try:
            payload = _decode_jwt(token)
        except ValueError:
            return {**_ANONYMOUS, "_auth_error": "invalid_token"}

        if payload.get("type", "access") != "access":
            return {**_ANONYMOUS, "_auth_error": "not_access_token"}

        return {
            "sub": payload.get("sub", ""),
            "role": payload.get("role"),
            "tenant_id": payload.get("tenant_id"),
            "branch_id": payload.get("branch_id"),
        }
