"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.exceptions import AuthenticationError, PermissionDeniedError
from ...database import DBSession
from . import crud
from .jwt_service import decode_access_token
from .models import UserRole
from .schemas import AuthenticatedUser

security = HTTPBearer(auto_error=False)


def _user_from_token(token: str) -> AuthenticatedUser:
    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        return AuthenticatedUser(
            id=int(payload["sub"]),
            email=payload["email"],
            first_name=payload.get("first_name") or "",
            last_name=payload.get("last_name"),
            role=UserRole(payload["role"]),
            is_verified=bool(payload.get("is_verified", False)),
        )
    except (KeyError, ValueError) as e:
        raise AuthenticationError(f"Invalid token payload: {e}") from e


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthenticatedUser:
    """Extract and validate current user from JWT token.

    This dependency decodes the JWT token and returns the authenticated user.
    It does NOT make a database call - all user info is in the token.
    """
    if credentials is None:
        raise AuthenticationError("Unauthorized")
    return _user_from_token(credentials.credentials)


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthenticatedUser | None:
    """Like get_current_user, but anonymous callers get None."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials)


def require_role(*allowed_roles: UserRole):
    """Dependency factory for role-based access control.

    Usage:
        @router.post("/properties")
        async def create(
            current_user: Annotated[
                AuthenticatedUser,
                Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
            ],
        ):
            ...
    """
    role_values = {r.value for r in allowed_roles}

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role.value not in role_values:
            raise PermissionDeniedError(
                "access", f"this resource (requires {', '.join(sorted(role_values))})"
            )
        return current_user

    return role_checker


async def get_current_admin(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: DBSession,
) -> AuthenticatedUser:
    """Admin gate that re-reads the role from the database.

    A token issued before the user was demoted or deactivated is refused.
    """
    user = await crud.get_user_by_id(db, current_user.id)
    if user is None or not user.is_active or user.role != UserRole.ADMIN:
        raise PermissionDeniedError("access", "this resource (requires admin)")
    return current_user


# Type alias for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
OptionalUser = Annotated[AuthenticatedUser | None, Depends(get_optional_user)]
AdminUser = Annotated[AuthenticatedUser, Depends(get_current_admin)]
LandlordUser = Annotated[
    AuthenticatedUser, Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN))
]
