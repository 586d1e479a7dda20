"""API endpoints package for the edge server."""

from bridgegate.app.api.widget import router as widget_router

__all__ = [
    "widget_router",
]
