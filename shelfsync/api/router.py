"""
API router - aggregates all route modules.
"""
from fastapi import APIRouter
from shelfsync.api.dashboard import router as dashboard_router
from shelfsync.api.webhooks import router as webhooks_router
from shelfsync.api.xero import router as xero_router
from shelfsync.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(dashboard_router)
api_router.include_router(webhooks_router)
api_router.include_router(xero_router)
api_router.include_router(health_router)
