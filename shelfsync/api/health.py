"""
Health check endpoints - used by load balancers and monitoring.

- GET /health       - basic liveness (always 200 if app running)
- GET /health/ready - readiness, including Shopify webhook registration status
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from shelfsync import __version__
from shelfsync.services.webhook_registration import STATUS_PENDING

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check - returns 200 if the app is running."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness check. "degraded" means the webhook subscription could not be
    confirmed; webhooks registered by an earlier run are still served.
    """
    result = getattr(request.app.state, "webhook_registration", None)
    registration = result.as_dict() if result is not None else {"status": STATUS_PENDING}
    registered = result is not None and result.registered

    return {
        "status": "ready" if registered else "degraded",
        "checks": {
            "webhook_registration": registration,
            "inventory_log_size": len(request.app.state.inventory_log),
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
