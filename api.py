"""
Tamu Accounts API

Main entry point for the accounts and authentication API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Common library imports
from common.database import MongoDB
from common.utils import success_response

# App-specific imports
from accounts.config import settings
from accounts.dependencies import init_all_services, get_notifier, get_repository
from accounts.handlers import register_exception_handlers
from accounts.routers import auth_router, profile_router, push_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
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
    logger.info("Starting Tamu Accounts API...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
    )

    init_all_services(settings=settings, db=main_db.db)
    await get_repository().ensure_indexes()
    logger.info("All services initialized successfully!")

    yield

    # Shutdown
    logger.info("Shutting down Tamu Accounts API...")
    await get_notifier().drain(timeout=10)
    await main_db.disconnect()
    logger.info("Tamu Accounts API shut down complete.")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="Tamu Accounts API",
    description="Accounts, authentication, profiles and push devices for the Tamu mobile app",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

register_exception_handlers(app)

# =============================================================================
# CORS Middleware
# =============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# Include Routers (all under /api prefix)
# =============================================================================
API_PREFIX = "/api"

app.include_router(auth_router, prefix=API_PREFIX, tags=["Authentication"])
app.include_router(profile_router, prefix=API_PREFIX, tags=["Profile"])
app.include_router(push_router, prefix=API_PREFIX, tags=["Push"])

# Uploaded profile photos
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
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
    database_up = await main_db.ping()
    return success_response(
        "API is healthy",
        status="ok",
        version=API_VERSION,
        database="connected" if database_up else "disconnected",
    )


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
