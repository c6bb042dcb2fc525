"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone

from triage_hub.config.firebase import get_db
from triage_hub.core.settings import settings
from triage_hub.routes.dependencies import get_gateway, get_room_registry
from triage_hub.services.classifier import ClassifierGateway
from triage_hub.services.realtime import RoomRegistry


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(registry: RoomRegistry = Depends(get_room_registry)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "live_sessions": registry.session_count(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/classifier")
async def classifier_health(gateway: ClassifierGateway = Depends(get_gateway)):
    """
    How triage calls were answered since startup.
    A high fallback count means the external classifier is down or slow.
    """
    return {
        "enabled": gateway.enabled,
        "timeout_seconds": gateway.client.timeout_seconds,
        "outcomes": gateway.stats(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/db")
def database_health():
    """
    Database connectivity check.
    Lists Firestore collections to verify the connection.
    """
    try:
        db = get_db()
        collections = list(db.collections())

        return {
            "status": "healthy",
            "database": "firestore",
            "connected": True,
            "collections_count": len(collections),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
