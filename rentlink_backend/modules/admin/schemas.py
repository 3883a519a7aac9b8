"""Admin dashboard schemas."""

from pydantic import BaseModel

from ..auth.models import UserRole


class PlatformStats(BaseModel):
    """Headline numbers for the admin dashboard."""

    users: int = 0
    properties: int = 0
    approved_leases: int = 0
    inquiries: int = 0


class UserRoleUpdate(BaseModel):
    role: UserRole


class SweepResult(BaseModel):
    overdue_payments: int = 0
    expired_leases: int = 0
