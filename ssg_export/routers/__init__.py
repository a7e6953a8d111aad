"""Application routers package."""

from .export import export_router

__all__ = ["export_router"]
