"""API routers for Rollcall."""

from rollcall.routers import import_router

__all__ = ["import_router"]
