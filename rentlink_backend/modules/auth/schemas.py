"""Authentication and user schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from ..commons import ORMModel
from .models import UserRole

# ----- User Schemas -----


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=40)


class UserRegister(UserBase):
    """Schema for sign-up. New users always start as tenants."""

    password: str = Field(..., min_length=8, max_length=72)


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    first_name: str | None = Field(None, min_length=1, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=40)
    avatar_url: str | None = Field(None, max_length=500)


class UserResponse(ORMModel):
    """Schema for user response."""

    id: int
    email: str
    first_name: str
    last_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    role: UserRole
    is_verified: bool
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime


class UserSummary(ORMModel):
    """Compact user reference embedded in other responses."""

    id: int
    email: str
    first_name: str
    last_name: str | None = None
    phone: str | None = None


# ----- Auth Schemas -----


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str
    remember_me: bool = False


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class ChangePasswordRequest(BaseModel):
    """Schema for password change request."""

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=72)


class AuthenticatedUser(BaseModel):
    """Authorization context for the caller of a request.

    Decoded once from the access token and passed explicitly into every
    service that mutates owned data.
    """

    id: int
    email: str
    first_name: str = ""
    last_name: str | None = None
    role: UserRole
    is_verified: bool = False

    @property
    def full_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_landlord(self) -> bool:
        return self.role == UserRole.LANDLORD

    @classmethod
    def from_user(cls, user) -> "AuthenticatedUser":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            is_verified=user.is_verified,
        )
