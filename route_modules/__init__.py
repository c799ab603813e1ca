"""
Routes package - organized API routes.

Import the combined router for use in main.py. Specific routers come before
the generic collection router so their fixed paths win.
"""
from fastapi import APIRouter

from .basic_details_routes import router as basic_details_router
from .staging_routes import router as staging_router
from .lead_routes import router as lead_router
from .admin_routes import router as admin_router
from .live_routes import router as live_router

# Combined router that includes all sub-routers
combined_router = APIRouter()
combined_router.include_router(basic_details_router, tags=["basic-details"])
combined_router.include_router(staging_router, tags=["staging"])
combined_router.include_router(lead_router, tags=["leads"])
combined_router.include_router(admin_router, tags=["collections"])
combined_router.include_router(live_router, tags=["live"])

__all__ = ['combined_router', 'basic_details_router', 'staging_router', 'lead_router', 'admin_router', 'live_router']
