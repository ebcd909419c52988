"""Health check endpoint."""

from fastapi import APIRouter, Request
from datetime import datetime, timezone

from .. import __version__

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": _now(),
        "service": "tryon-agent",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once the lifespan hook has wired the try-on service."""
    ready = getattr(request.app.state, "tryon_service", None) is not None
    return {
        "ready": ready,
        "timestamp": _now(),
    }
