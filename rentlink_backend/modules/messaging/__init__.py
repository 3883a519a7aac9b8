"""Messaging module: property inquiries and chat."""

from .models import Inquiry, InquiryStatus, Message
from .routers import router

__all__ = [
    # Models
    "Inquiry",
    "Message",
    # Enums
    "InquiryStatus",
    # Router
    "router",
]
