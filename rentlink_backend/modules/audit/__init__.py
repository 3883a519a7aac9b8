"""Audit trail of admin actions."""

from .crud import record_audit
from .models import AuditLog

__all__ = ["AuditLog", "record_audit"]
