"""
Request ID Middleware for the address service.

Generates a unique request id (UUID) for each incoming request and:
1. Attaches it to request.state for use in handlers
2. Adds X-Request-ID header to all responses
3. Sets it on the logging context so every log line of the request carries it
"""
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from utils.logging_config import request_id_var


logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and propagate request IDs."""

    async def dispatch(self, request: Request, call_next):
        # Reuse the caller's id when one is supplied
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response

