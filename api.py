"""
SchoolFlow FastAPI Application

Main entry point for the SchoolFlow auth gateway: session authentication,
role-based route protection and access logging.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Common library imports
from common.database import MongoDB
from common.logging import configure_logging
from common.utils import success_response, APIException

# App-specific imports
from schoolflow.config import settings

# Import routers
from schoolflow.routers import (
    auth_router,
    teacher_auth_router,
    sessions_router,
    logger_router,
)

# Import service initialization
from schoolflow.dependencies import (
    init_all_services,
    get_access_logger,
    get_route_guard_middleware,
    get_session_store,
)

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


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
    configure_logging(settings.get_log_level())
    logger.info("Starting SchoolFlow API...")

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    )

    init_all_services(db=main_db.db, settings=settings)
    await get_session_store().ensure_indexes()
    logger.info("All services initialized successfully")

    yield

    # Shutdown
    logger.info("Shutting down SchoolFlow API...")
    await get_access_logger().aclose()
    await main_db.disconnect()
    logger.info("SchoolFlow API shut down complete")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="SchoolFlow API",
    description="Session authentication and role-based route protection for SchoolFlow",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)


# =============================================================================
# Route Guard Middleware
# =============================================================================
@app.middleware("http")
async def route_guard(request: Request, call_next):
    """Run the route guard built at startup on every request."""
    return await get_route_guard_middleware()(request, call_next)


# =============================================================================
# CORS Middleware
# =============================================================================
# Added last so it wraps the guard and also answers preflight requests
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
    """Render API errors in the standard error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
        headers=exc.headers,
    )


# =============================================================================
# Include Routers (all under /api prefix)
# =============================================================================
app.include_router(auth_router, prefix=settings.API_PREFIX, tags=["Authentication"])
app.include_router(teacher_auth_router, prefix=settings.API_PREFIX, tags=["Teacher Authentication"])
app.include_router(sessions_router, prefix=settings.API_PREFIX, tags=["Sessions"])
app.include_router(logger_router, prefix=settings.API_PREFIX, tags=["Logging"])


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
        "version": VERSION,
        "database": await main_db.ping(),
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
