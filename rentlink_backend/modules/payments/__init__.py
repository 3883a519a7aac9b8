"""Payments module: rent schedule, overdue sweep and payment recording."""

from .models import Payment, PaymentStatus, PaymentType
from .routers import router

__all__ = [
    # Models
    "Payment",
    # Enums
    "PaymentStatus",
    "PaymentType",
    # Router
    "router",
]
