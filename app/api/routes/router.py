"""API router aggregating all endpoints."""

from fastapi import APIRouter

from app.api.routes import health, messaging, scheduling

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Slots, missed appointments and rebooking
api_router.include_router(
    scheduling.router,
    tags=["scheduling"],
)

# Notification diagnostics
api_router.include_router(
    messaging.router,
    tags=["messaging"],
)
