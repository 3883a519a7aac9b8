"""Authentication business logic services."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    AuthenticationError,
    DuplicateResourceError,
    NotFoundError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.utils import as_utc, utc_now
from . import crud
from .jwt_service import (
    create_access_token,
    create_refresh_token,
    get_token_expiry_seconds,
    hash_refresh_token,
)
from .models import User, UserRole
from .password_service import verify_password
from .schemas import ProfileUpdate, TokenResponse, UserRegister

logger = get_logger(__name__)


def _issue_access_token(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        email=user.email,
        role=user.role.value,
        first_name=user.first_name,
        last_name=user.last_name,
        is_verified=user.is_verified,
    )


async def _issue_tokens(
    db: AsyncSession,
    user: User,
    remember_me: bool = False,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> TokenResponse:
    refresh_token, refresh_expires = create_refresh_token(remember_me)
    await crud.create_refresh_token(
        db=db,
        user=user,
        token=refresh_token,
        expires_at=refresh_expires,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    return TokenResponse(
        access_token=_issue_access_token(user),
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=get_token_expiry_seconds(),
    )


async def register_user(
    db: AsyncSession,
    data: UserRegister,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[User, TokenResponse]:
    """Create a tenant account and sign it in.

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    if await crud.get_user_by_email(db, data.email):
        raise DuplicateResourceError("An account with this email already exists")

    user = await crud.create_user(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
    )
    tokens = await _issue_tokens(db, user, user_agent=user_agent, ip_address=ip_address)
    await db.commit()

    logger.info("User registered", extra={"user_id": user.id})
    return user, tokens


async def authenticate_user(
    db: AsyncSession,
    email: str,
    password: str,
    remember_me: bool = False,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[User, TokenResponse]:
    """Authenticate user and return tokens.

    Args:
        db: Database session
        email: User's email
        password: User's password
        remember_me: Whether to extend refresh token expiry
        user_agent: Client user agent string
        ip_address: Client IP address

    Returns:
        Tuple of (User, TokenResponse)

    Raises:
        AuthenticationError: If authentication fails
    """
    user = await crud.get_user_by_email(db, email)
    if not user:
        raise AuthenticationError("Invalid email or password")

    now = utc_now()
    locked_until = as_utc(user.locked_until)
    if locked_until and locked_until > now:
        remaining = int((locked_until - now).total_seconds()) // 60
        raise AuthenticationError(
            f"Account is locked. Try again in {remaining + 1} minutes."
        )

    if not user.is_active:
        raise AuthenticationError("Account is disabled")

    if not verify_password(password, user.password_hash):
        await crud.increment_failed_login(db, user)

        if user.failed_login_attempts >= settings.max_login_attempts:
            lock_until = now + timedelta(minutes=settings.lockout_duration_minutes)
            await crud.lock_user(db, user, lock_until)
            await db.commit()
            logger.warning("Account locked", extra={"user_id": user.id})
            raise AuthenticationError(
                f"Account locked due to too many failed attempts. "
                f"Try again in {settings.lockout_duration_minutes} minutes."
            )

        await db.commit()
        remaining_attempts = settings.max_login_attempts - user.failed_login_attempts
        raise AuthenticationError(
            f"Invalid email or password. {remaining_attempts} attempts remaining."
        )

    await crud.update_user_last_login(db, user)
    tokens = await _issue_tokens(db, user, remember_me, user_agent, ip_address)
    await db.commit()

    return user, tokens


async def refresh_access_token(
    db: AsyncSession,
    refresh_token: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> TokenResponse:
    """Rotate a refresh token and issue a fresh access token.

    The new access token reflects the user's current role, so a tenant
    promoted to landlord picks up the new role on the next refresh.

    Raises:
        AuthenticationError: If refresh token is invalid or expired
    """
    stored_token = await crud.get_refresh_token_by_hash(
        db, hash_refresh_token(refresh_token)
    )

    if not stored_token:
        raise AuthenticationError("Invalid refresh token")
    if stored_token.is_revoked:
        raise AuthenticationError("Refresh token has been revoked")
    if stored_token.is_expired:
        raise AuthenticationError("Refresh token has expired")

    user = await crud.get_user_by_id(db, stored_token.user_id)
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    await crud.revoke_refresh_token(db, stored_token)
    tokens = await _issue_tokens(db, user, user_agent=user_agent, ip_address=ip_address)
    await db.commit()
    return tokens


async def logout_user(db: AsyncSession, user_id: int) -> int:
    """Logout user by revoking all their refresh tokens."""
    count = await crud.revoke_all_user_tokens(db, user_id)
    await db.commit()
    return count


async def change_password(
    db: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> None:
    """Change user's password and sign out all sessions.

    Raises:
        NotFoundError: If user not found
        ValidationError: If current password is incorrect
    """
    user = await crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    await crud.update_user_password(db, user, new_password)
    await crud.revoke_all_user_tokens(db, user_id)
    await db.commit()


async def update_profile(db: AsyncSession, user_id: int, data: ProfileUpdate) -> User:
    user = await crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    await crud.update_user(db, user, **data.model_dump(exclude_unset=True))
    await db.commit()
    return user


async def promote_to_landlord(db: AsyncSession, user_id: int) -> User:
    """Turn a verified applicant into a landlord.

    This is the only code path that grants the landlord role from the
    verification workflow. It flushes but does not commit; the caller owns
    the transaction so the request and role change land together.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = await crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError(f"User with ID {user_id} not found")

    if user.role != UserRole.ADMIN:
        user.role = UserRole.LANDLORD
    user.is_verified = True
    await db.flush()

    logger.info("User promoted to landlord", extra={"user_id": user.id})
    return user


async def update_user_role(db: AsyncSession, user_id: int, role: UserRole) -> User:
    """Set a user's role. Flushes only; the admin service commits with its audit entry.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = await crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError(f"User with ID {user_id} not found")

    previous = user.role
    await crud.update_user(db, user, role=role)

    logger.info(
        "User role updated",
        extra={"user_id": user_id, "from_role": previous.value, "to_role": role.value},
    )
    return user


async def create_initial_admin(
    db: AsyncSession,
    admin_email: str,
    admin_password: str,
    admin_first_name: str,
    admin_last_name: str | None = None,
) -> User:
    """Create the first admin user on an empty database.

    Raises:
        ValidationError: If any user already exists
    """
    if await crud.count_users(db) > 0:
        raise ValidationError("Database already has users. Cannot seed.")

    user = await crud.create_user(
        db,
        email=admin_email,
        password=admin_password,
        first_name=admin_first_name,
        last_name=admin_last_name,
        role=UserRole.ADMIN,
        is_verified=True,
    )
    await db.commit()

    logger.info("Initial admin created", extra={"user_id": user.id})
    return user
