"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.items import router as items_router
from routes.manual_settings import router as manual_settings_router
from routes.sync import router as sync_router

__all__ = [
    "items_router",
    "manual_settings_router",
    "sync_router",
]
