"""Authentication API routes."""

from fastapi import APIRouter, Request

from ...core.exceptions import NotFoundError
from ...database import DBSession
from ..commons import BaseResponse
from . import crud, services
from .dependencies import CurrentUser
from .schemas import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RefreshTokenRequest,
    TokenResponse,
    UserRegister,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_client_info(request: Request) -> tuple[str | None, str | None]:
    """Extract user agent and client IP from the request."""
    user_agent = request.headers.get("user-agent")
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return user_agent, ip_address


@router.post("/register", response_model=BaseResponse[TokenResponse])
async def register(request: Request, data: UserRegister, db: DBSession):
    """Create a tenant account and return tokens."""
    user_agent, ip_address = get_client_info(request)
    user, tokens = await services.register_user(db, data, user_agent, ip_address)

    return BaseResponse(
        success=True,
        message=f"Welcome, {user.first_name}!",
        data=tokens,
    )


@router.post("/login", response_model=BaseResponse[TokenResponse])
async def login(request: Request, login_data: LoginRequest, db: DBSession):
    """Authenticate user and return access/refresh tokens."""
    user_agent, ip_address = get_client_info(request)

    user, tokens = await services.authenticate_user(
        db=db,
        email=login_data.email,
        password=login_data.password,
        remember_me=login_data.remember_me,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    return BaseResponse(
        success=True,
        message=f"Welcome back, {user.first_name}!",
        data=tokens,
    )


@router.post("/refresh", response_model=BaseResponse[TokenResponse])
async def refresh_token(
    request: Request, refresh_data: RefreshTokenRequest, db: DBSession
):
    """Refresh access token using refresh token."""
    user_agent, ip_address = get_client_info(request)
    tokens = await services.refresh_access_token(
        db=db,
        refresh_token=refresh_data.refresh_token,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    return BaseResponse(
        success=True,
        message="Token refreshed successfully",
        data=tokens,
    )


@router.post("/logout", response_model=BaseResponse[None])
async def logout(current_user: CurrentUser, db: DBSession):
    """Logout user by revoking all refresh tokens."""
    count = await services.logout_user(db, current_user.id)

    return BaseResponse(
        success=True,
        message=f"Logged out successfully. {count} session(s) terminated.",
    )


@router.get("/me", response_model=BaseResponse[UserResponse])
async def get_current_user_info(current_user: CurrentUser, db: DBSession):
    """Get current user's profile."""
    user = await crud.get_user_by_id(db, current_user.id)
    if not user:
        raise NotFoundError("User not found")

    return BaseResponse(success=True, data=UserResponse.model_validate(user))


@router.patch("/me", response_model=BaseResponse[UserResponse])
async def update_current_user(
    data: ProfileUpdate, current_user: CurrentUser, db: DBSession
):
    """Update current user's profile fields."""
    user = await services.update_profile(db, current_user.id, data)

    return BaseResponse(
        success=True,
        message="Profile updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.post("/change-password", response_model=BaseResponse[None])
async def change_password(
    password_data: ChangePasswordRequest, current_user: CurrentUser, db: DBSession
):
    """Change current user's password."""
    await services.change_password(
        db=db,
        user_id=current_user.id,
        current_password=password_data.current_password,
        new_password=password_data.new_password,
    )

    return BaseResponse(
        success=True,
        message="Password changed successfully. Please login again.",
    )
