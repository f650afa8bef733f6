"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from app.api.routes import health, links, users
from app.core.config import settings

# Create root router
api_router = APIRouter()

for module in (links, users, health):
    api_router.include_router(module.router, prefix=settings.API_PREFIX)

__all__ = ["api_router"]
