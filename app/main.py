"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures middleware and exception handlers.
"""

import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from app.api import api_router
from app.core.config import settings
from app.core.logging import setup_logging
from app.core.redis import redis_manager
from app.core.url_logger import setup_access_logging, shutdown_access_logging
from app.db.base import DatabaseHealthCheck, init_db
from app.middleware.logging import LoggingMiddleware
from app.scheduler.scheduler import scheduler_service

# Setup logging
logger = setup_logging()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.REQUEST_LOGGING_ENABLED:
    app.add_middleware(LoggingMiddleware)

# Include API router
app.include_router(api_router)


# Add exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report invalid bodies and path parameters as 400 with the field errors."""
    logger.info(f"Request validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"detail": "Validation error", "errors": exc.errors()}),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to catch and log all unhandled exceptions."""
    error_id = f"error-{time.time()}"

    logger.bind(
        error_id=error_id,
        url=str(request.url),
        method=request.method,
        path_params=request.path_params,
        client_host=request.client.host if request.client else None,
    ).opt(exception=exc).error(f"Unhandled exception in {request.method} {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error occurred",
            "error_id": error_id,
            "message": str(exc) if settings.DEBUG else "Internal server error"
        }
    )


# Add startup and shutdown event handlers
@app.on_event("startup")
async def startup_event():
    """Run startup tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    setup_access_logging()

    if settings.DB_CREATE_TABLES:
        logger.info("Creating database tables")
        await init_db()

    db_status = await DatabaseHealthCheck.check_connection()
    if db_status["status"] != "healthy":
        logger.warning(f"Database is not reachable: {db_status['error']}")

    if not await redis_manager.ping() and not await redis_manager.reconnect():
        logger.warning("Redis is not reachable; redirects will fail until it is")

    if settings.SCHEDULER_ENABLED:
        try:
            scheduler_service.start()
        except Exception as e:
            logger.opt(exception=e).critical("Scheduler could not be started")
    else:
        logger.info("Scheduler is disabled in settings")


@app.on_event("shutdown")
async def shutdown_event():
    """Run cleanup tasks."""
    logger.info(f"Shutting down {settings.APP_NAME}")

    if scheduler_service.is_running:
        scheduler_service.shutdown()

    await redis_manager.close()
    shutdown_access_logging()
