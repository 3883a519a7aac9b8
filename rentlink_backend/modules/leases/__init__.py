"""Leases module: drafting, e-signature workflow and lease status machine."""

from .models import Lease, LeaseStatus, TenantDocumentType
from .routers import router
from .state_machine import LeaseAction, next_status

__all__ = [
    # Models
    "Lease",
    # Enums
    "LeaseStatus",
    "TenantDocumentType",
    "LeaseAction",
    # State machine
    "next_status",
    # Router
    "router",
]
