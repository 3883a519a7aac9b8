"""Logging infrastructure for the RentLink backend."""

from .config import get_logger, setup_logging, shutdown_logging
from .context import (
    TransactionIdFilter,
    get_transaction_id,
    set_transaction_id,
)
from .middleware import RequestIdMiddleware
from .structured import StructuredFormatter

__all__ = [
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "RequestIdMiddleware",
    "StructuredFormatter",
    "TransactionIdFilter",
    "get_transaction_id",
    "set_transaction_id",
]
