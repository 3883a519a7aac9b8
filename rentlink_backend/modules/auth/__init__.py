"""Authentication and identity module."""

from .dependencies import (
    AdminUser,
    CurrentUser,
    LandlordUser,
    OptionalUser,
    get_current_user,
    require_role,
)
from .models import RefreshToken, User, UserRole
from .routers import router
from .schemas import AuthenticatedUser

__all__ = [
    # Models
    "User",
    "UserRole",
    "RefreshToken",
    # Router
    "router",
    # Dependencies
    "get_current_user",
    "require_role",
    "CurrentUser",
    "OptionalUser",
    "AdminUser",
    "LandlordUser",
    # Schemas
    "AuthenticatedUser",
]
