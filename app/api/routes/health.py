"""Health check endpoints for monitoring application status."""

import time

import redis.asyncio as redis
from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_redis
from app.core.config import settings
from app.db.session import get_db

router = APIRouter(tags=["health"])


async def _check_database(db: AsyncSession) -> dict:
    try:
        start_time = time.perf_counter()
        result = await db.execute(text("SELECT 1"))
        if result.scalar_one() == 1:
            return {
                "status": "healthy",
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            }
        return {"status": "unhealthy", "error": "Unexpected query result"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


async def _check_redis(client: redis.Redis) -> dict:
    try:
        start_time = time.perf_counter()
        if await client.ping():
            return {
                "status": "healthy",
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            }
        return {"status": "unhealthy", "error": "Redis ping failed"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Get system health status",
    response_description="Health status of all system components"
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Check health of the database and the click accumulator."""
    components = {
        "database": await _check_database(db),
        "redis": await _check_redis(redis_client),
    }
    healthy = all(component["status"] == "healthy" for component in components.values())

    return {
        "status": "healthy" if healthy else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "components": components,
    }


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    response_description="Application readiness status"
)
async def readiness_probe(
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Check if application is ready to handle requests."""
    # Redirects need both stores
    components_status = {
        "api": True,
        "database": (await _check_database(db))["status"] == "healthy",
        "redis": (await _check_redis(redis_client))["status"] == "healthy",
    }

    return {
        "ready": all(components_status.values()),
        "components": components_status
    }


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    response_description="Application liveness status"
)
async def liveness_probe():
    """Simple check that application is running."""
    return {"alive": True}
