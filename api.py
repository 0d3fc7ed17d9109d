"""
Inkwell FastAPI Application

Main entry point for the Inkwell API: authentication and per-device
session management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Common library imports
from common.database import MongoDB
from common.utils import APIException, success_response

# App-specific imports
from inkwell import __version__
from inkwell.auth.dependencies import init_auth_services
from inkwell.auth.errors import PersistenceError
from inkwell.config import settings
from inkwell.repositories import (
    InMemoryAuthRepository,
    InMemoryUserRepository,
    MongoAuthRepository,
    MongoUserRepository,
)
from inkwell.routers import auth_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG or settings.is_development() else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


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
    logger.info("Starting Inkwell API...")

    settings.validate_required()

    if settings.uses_memory_storage():
        auth_repository = InMemoryAuthRepository()
        user_repository = InMemoryUserRepository(auth_repository)
        logger.warning("Using in-memory storage; data is lost on restart")
    else:
        await main_db.connect(
            uri=settings.MONGODB_URI,
            database_name=settings.MONGODB_DATABASE,
            timeout_ms=settings.MONGODB_TIMEOUT_MS,
        )
        logger.info(f"Connected to database: {settings.MONGODB_DATABASE}")

        user_repository = MongoUserRepository(main_db.db)
        auth_repository = MongoAuthRepository(main_db.db)
        await user_repository.ensure_indexes()
        await auth_repository.ensure_indexes()

    init_auth_services(
        user_repository=user_repository,
        auth_repository=auth_repository,
        settings=settings,
    )
    logger.info("Inkwell API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Inkwell API...")
    if main_db.is_connected:
        await main_db.disconnect()


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="Inkwell API",
    description="Authentication and per-device sessions for the Inkwell platform",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

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
# Error Handling
# =============================================================================
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Render API exceptions in the standard error envelope."""
    if isinstance(exc, PersistenceError):
        logger.error(
            f"Persistence failure in {exc.op} on {request.method} {request.url.path}",
            exc_info=exc.cause,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
        headers=exc.headers,
    )


# =============================================================================
# Include Routers (all under /api/v1 prefix)
# =============================================================================
API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX, tags=["Authentication"])


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
        "version": __version__,
        "storage": settings.STORAGE_BACKEND,
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
