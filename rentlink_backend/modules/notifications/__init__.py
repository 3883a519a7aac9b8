"""Email notifications for the lease workflow."""

from . import templates
from .email_service import send_email

__all__ = ["send_email", "templates"]
