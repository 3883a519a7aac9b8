"""Listings module: properties, approval workflow, saved and recently viewed."""

from .models import (
    ApprovalStatus,
    Property,
    PropertyType,
    RecentlyViewed,
    SavedProperty,
)
from .routers import router

__all__ = [
    # Models
    "Property",
    "SavedProperty",
    "RecentlyViewed",
    # Enums
    "ApprovalStatus",
    "PropertyType",
    # Router
    "router",
]
