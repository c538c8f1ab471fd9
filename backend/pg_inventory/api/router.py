"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from pg_inventory.api.routes import bookings, listings, maintenance, room_configurations

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(bookings.router)
api_router.include_router(room_configurations.router)
api_router.include_router(listings.router)
api_router.include_router(maintenance.router)
