"""API routers for the dashboard."""
from .radar import router as radar_router
from .targets import router as targets_router

__all__ = ["radar_router", "targets_router"]
