"""Verification module: tenant to landlord applications."""

from .models import IdType, VerificationRequest
from .routers import router

__all__ = [
    # Models
    "VerificationRequest",
    # Enums
    "IdType",
    # Router
    "router",
]
