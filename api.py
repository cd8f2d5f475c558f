"""
Accounts FastAPI Application

Main entry point for the accounts API.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Common library imports
from common.database import MongoDB
from common.utils import success_response

# App-specific imports
from accounts.config import settings
from accounts.dependencies import init_all_services
from accounts.errors import register_exception_handlers
from accounts.middleware.body_limit import BodySizeLimitMiddleware
from accounts.user.dependencies import get_user_service

# Import routers
from accounts.auth.router import router as auth_router
from accounts.user.router import router as user_router


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# =============================================================================
# Database Instance
# =============================================================================
main_db = MongoDB()


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections
    and service initialization.
    """
    # Startup
    logger.info("Starting Accounts API...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
    )

    init_all_services(db=main_db.db, settings=settings)
    await get_user_service().ensure_indexes()

    logger.info("Accounts API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Accounts API...")
    await main_db.disconnect()
    logger.info("Accounts API shut down complete")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="Accounts API",
    description="User registration, login and token-based sessions",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

register_exception_handlers(app)

# =============================================================================
# Middleware
# =============================================================================
app.add_middleware(
    BodySizeLimitMiddleware,
    max_json_bytes=settings.MAX_JSON_BODY_BYTES,
    max_multipart_bytes=settings.MAX_MULTIPART_BYTES,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# Include Routers (all under /api/v1 prefix)
# =============================================================================
API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX, tags=["Authentication"])
app.include_router(user_router, prefix=API_PREFIX, tags=["User"])

# =============================================================================
# Static Media (local provider only)
# =============================================================================
if settings.MEDIA_PROVIDER.lower() == "local":
    Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.MEDIA_BASE_URL,
        StaticFiles(directory=settings.MEDIA_ROOT),
        name="media",
    )


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get("/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and database connection.
    """
    return success_response({
        "status": "ok",
        "version": API_VERSION,
        "database": main_db.is_connected,
    })


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
