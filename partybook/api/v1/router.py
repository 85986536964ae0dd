"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from partybook.api.v1 import bookings, internal, live, notifications

api_router = APIRouter()

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Live updates
api_router.include_router(live.router, tags=["Live"])

# Internal
api_router.include_router(internal.router, prefix="/internal", tags=["Internal"])
