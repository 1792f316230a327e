"""
API Key Authentication Middleware for the address service.

Validates the X-API-Key header against configured API keys.
Health, docs and the static address documents stay public so that
browsers can fetch the lookup tables directly.
"""
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse


logger = logging.getLogger(__name__)

# Endpoints that don't require authentication
PUBLIC_PATHS = {
    "/",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api",
    "/api/v1/health",
}

# Path prefixes that don't require authentication
PUBLIC_PREFIXES = (
    "/address/",
)


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Middleware to validate API key authentication."""

    def __init__(self, app, api_keys: list[str] = None):
        """
        Initialize API Key middleware.

        Args:
            app: ASGI application
            api_keys: List of valid API keys. If empty/None, auth is disabled.
        """
        super().__init__(app)
        self.api_keys = set(api_keys) if api_keys else set()
        self.auth_enabled = len(self.api_keys) > 0

        if self.auth_enabled:
            logger.info(f"API Key authentication enabled with {len(self.api_keys)} key(s)")
        else:
            logger.info("API Key authentication disabled (no keys configured)")

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not self.auth_enabled or self._is_public_path(path):
            return await call_next(request)

        api_key = request.headers.get("X-API-Key")
        if not api_key or api_key not in self.api_keys:
            reason = "Missing X-API-Key header" if not api_key else "Invalid API key"
            logger.warning(f"{reason} for {request.method} {path}")
            return JSONResponse(
                status_code=401,
                content={
                    "status": "error",
                    "code": "UNAUTHORIZED",
                    "message": reason,
                    "details": {}
                }
            )

        return await call_next(request)

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in the public (no-auth) list."""
        return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)
