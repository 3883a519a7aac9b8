"""Admin module: dashboard, moderation queues, audit log and sweeps."""

from .routers import router
from .scheduler import SweepScheduler

__all__ = ["router", "SweepScheduler"]
