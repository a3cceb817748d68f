"""API router package for endpoint composition."""

from .health import api_create_health_router
from .plugins import api_create_plugins_router
from .sync import api_create_sync_router

__all__ = ["api_create_health_router", "api_create_plugins_router", "api_create_sync_router"]
