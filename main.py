"""
Homestay Address API

Backs the address step of the homestay registration and profile forms:
cascading province → district → municipality → ward selection with
consolidated clearing of dependent fields.

Usage:
    uvicorn main:app --reload

Then access the API documentation at http://localhost:8000/docs
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, RedirectResponse

from utils.exceptions import AppError
from utils.logging_config import configure_logging
from utils.config import (
    API_KEYS,
    LOG_LEVEL,
    LOG_JSON_FORMAT,
    ADDRESS_DATA_DIR,
    ADDRESS_DATA_BASE_URL,
    PRELOAD_ADDRESS_LOOKUP,
)
from middleware.request_id import RequestIDMiddleware
from middleware.api_key import APIKeyMiddleware

# Configure structured JSON logging
configure_logging(level=LOG_LEVEL, json_format=LOG_JSON_FORMAT)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Warms the address lookup cache so the first form does not wait for it.
    """
    logger.info("Starting homestay address API...")

    if PRELOAD_ADDRESS_LOOKUP:
        from services.address_lookup_service import get_address_lookup
        lookup = await get_address_lookup()
        if lookup.is_empty:
            logger.warning("Address lookup unavailable - selectors start disabled")
        else:
            logger.info("Address lookup preloaded")

    logger.info("Homestay address API ready!")

    yield  # Application runs here

    logger.info("Shutting down homestay address API...")


# Create FastAPI application
app = FastAPI(
    title="Homestay Address API",
    description="""
    Address selection service for homestay registration.

    ## Features

    * **Cascading options**: province → district → municipality → ward
    * **Consolidated updates**: one change returns every dependent field that must be cleared
    * **Validation**: check a stored address against the lookup tables
    * **Bilingual output**: English / Nepali names and formatted address

    ## Workflow

    1. Fetch `/api/v1/address/provinces` to populate the first control
    2. POST each user choice to `/api/v1/address/change`
    3. Merge the returned `changes` into the form state
    """,
    version="0.1.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add custom middleware (order matters: last added = outermost)
app.add_middleware(APIKeyMiddleware, api_keys=API_KEYS)
app.add_middleware(RequestIDMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLER
# =============================================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Global handler for all AppError exceptions.

    Converts custom exceptions to consistent JSON responses.
    """
    logger.warning(f"[{exc.code}] {exc.message} | Details: {exc.details}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )

# Include API routes
from api.routes import router as api_router
app.include_router(api_router, prefix="/api/v1")

# Serve the lookup documents the way the registration form fetches them
if not ADDRESS_DATA_BASE_URL and ADDRESS_DATA_DIR.is_dir():
    app.mount("/address", StaticFiles(directory=ADDRESS_DATA_DIR), name="address")


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to the interactive docs."""
    return RedirectResponse(url="/docs")


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Homestay Address API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/api/v1/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=False
    )
