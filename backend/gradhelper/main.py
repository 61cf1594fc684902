"""
GradHelper - FastAPI Application

Main entry point for the messaging backend.
Provides endpoints for conversation threads between students and admins.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gradhelper.config.settings import settings
from gradhelper.infrastructure.exceptions import (
    GradHelperError,
    ValidationError,
    NotFoundError,
    PersistenceError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info(
        "GradHelper backend starting in %s mode with %s storage...",
        settings.environment, settings.storage_backend,
    )

    if settings.storage_backend == "database":
        from gradhelper.infrastructure.db.database import init_db
        await init_db()
        logger.info("Database connection pool initialized")

    yield

    # Shutdown
    if settings.storage_backend == "database":
        from gradhelper.infrastructure.db.database import close_db
        await close_db()
        logger.info("Database connection pool closed")

    logger.info("GradHelper backend shutting down...")


app = FastAPI(
    title="GradHelper",
    description="Messaging between students and administrators",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    """Handle storage outages."""
    logger.error("Persistence failure: %s", exc.message)
    return JSONResponse(
        status_code=503,
        content=exc.to_dict(),
    )


@app.exception_handler(GradHelperError)
async def general_error_handler(request: Request, exc: GradHelperError):
    """Handle all other application errors."""
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "gradhelper-api"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "GradHelper API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from gradhelper.api.routes import messages  # noqa: E402

app.include_router(messages.router, prefix="/api", tags=["Messages"])
