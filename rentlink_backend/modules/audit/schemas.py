"""Audit log schemas."""

from datetime import datetime
from typing import Any

from ..commons import ORMModel


class AuditLogResponse(ORMModel):
    id: int
    admin_id: int
    action: str
    target_type: str
    target_id: str
    details: dict[str, Any] | None = None
    timestamp: datetime
