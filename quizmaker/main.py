"""
FastAPI Application Entry Point

This module initializes the FastAPI application with:
- CORS configuration
- Middleware setup
- Route registration
- Error kind to HTTP status mapping
- Health check endpoints
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from quizmaker.core.config import settings
from quizmaker.core.exceptions import ErrorKind, ServiceError
from quizmaker.db.database import check_db_connection, engine
from quizmaker.middleware.logging import LoggingMiddleware
from quizmaker.api.v1.router import api_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# One entry per kind; the handler never looks at messages
ERROR_STATUS = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# ============================================================
# Application Lifespan Events
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Startup:
    - Check database connection

    Shutdown:
    - Dispose the engine's connection pool
    """
    # ========== STARTUP ==========
    logger.info(f"Starting {settings.PROJECT_NAME}...")
    logger.info(f"Debug mode: {settings.DEBUG}")

    db_healthy = await check_db_connection()
    if db_healthy:
        logger.info("Database connection established successfully")
    else:
        logger.warning("Database connection check failed")

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    logger.info(f"Shutting down {settings.PROJECT_NAME}...")
    await engine.dispose()
    logger.info("Shutdown complete")


# ============================================================
# Create FastAPI Application
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Quiz authoring and attempt tracking API

    Features:
    - User Authentication (signed token, bearer header or cookie)
    - Quiz Management for instructors
    - Multiple choice, true/false and short answer questions
    - Quiz attempts and statistics for students
    """,
    version="1.0.0",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ----------------------------------------------------
# Middleware Configuration
# ----------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

if settings.DEBUG:
    app.add_middleware(LoggingMiddleware)


# ----------------------------------------------------
# Health Check Endpoints
# ----------------------------------------------------
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for monitoring the Store connection."""
    db_healthy = await check_db_connection()

    if not db_healthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "disconnected"}
        )

    return {"status": "healthy", "database": "connected"}


# ============================================================
# Include API Router
# ============================================================
app.include_router(
    api_router,
    prefix=settings.API_V1_PREFIX
)


# ----------------------------------------------------
# Exception Handlers
# ----------------------------------------------------
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map a typed service error to its HTTP status."""
    status_code = ERROR_STATUS[exc.kind]

    headers = None
    if exc.kind == ErrorKind.UNAUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}

    if exc.kind == ErrorKind.STORE_ERROR:
        logger.error(f"Store error on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
        headers=headers
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Store failures that escaped a service transaction."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database operation failed", "kind": ErrorKind.STORE_ERROR.value}
    )
