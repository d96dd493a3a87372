"""FastAPI routes for Parcel Notify."""

from parcel_notify.api.routes import router

__all__ = ["router"]
