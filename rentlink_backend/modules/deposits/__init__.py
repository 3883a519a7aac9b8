"""Deposits module: security deposit escrow."""

from .models import Deposit, DepositPaymentMethod, DepositStatus
from .routers import router

__all__ = [
    # Models
    "Deposit",
    # Enums
    "DepositStatus",
    "DepositPaymentMethod",
    # Router
    "router",
]
