"""Health endpoints."""

from fastapi import APIRouter, status

from ...config import settings
from ...db import ping_database

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check the MongoDB connection."""
    connected = ping_database()
    return {
        "database": settings.mongodb_db_name,
        "connected": connected,
        "message": "Database connected." if connected else "Database connection failed.",
    }
