"""
Middleware package for the address service.
"""
from middleware.request_id import RequestIDMiddleware
from middleware.api_key import APIKeyMiddleware

__all__ = ["RequestIDMiddleware", "APIKeyMiddleware"]
