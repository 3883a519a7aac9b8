"""Admin API routes: dashboard, users, moderation queues, audit log and sweeps."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ...core.storage import Storage
from ...database import DBSession
from ..audit.schemas import AuditLogResponse
from ..auth.dependencies import AdminUser
from ..auth.models import UserRole
from ..auth.schemas import UserResponse
from ..commons import (
    BaseResponse,
    PaginatedResponse,
    PaginationParams,
    StatusCounts,
    pagination_params,
)
from ..listings import crud as listing_crud
from ..listings import services as listing_services
from ..listings.models import ApprovalStatus
from ..listings.routers import build_property_response, build_property_responses
from ..listings.schemas import AdminDecision, PropertyResponse
from ..verification import services as verification_services
from ..verification.schemas import (
    VerificationApproval,
    VerificationDetail,
    VerificationRejection,
    VerificationResponse,
)
from . import services
from .schemas import PlatformStats, SweepResult, UserRoleUpdate

router = APIRouter(prefix="/admin", tags=["Admin"])

Pagination = Annotated[PaginationParams, Depends(pagination_params)]


@router.get("/stats", response_model=BaseResponse[PlatformStats])
async def get_platform_stats(current_user: AdminUser, db: DBSession):
    """Get headline platform numbers."""
    return BaseResponse(success=True, data=await services.platform_stats(db, current_user))


# ----- Users -----


@router.get("/users", response_model=BaseResponse[PaginatedResponse[UserResponse]])
async def list_users(
    current_user: AdminUser,
    db: DBSession,
    pagination: Pagination,
    role: UserRole | None = None,
    search: str | None = None,
):
    users, total = await services.list_users(
        db,
        current_user,
        role=role,
        search=search,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.patch("/users/{user_id}/role", response_model=BaseResponse[UserResponse])
async def update_user_role(
    user_id: int, data: UserRoleUpdate, current_user: AdminUser, db: DBSession
):
    """Change a user's role."""
    user = await services.update_user_role(db, current_user, user_id, data.role)
    return BaseResponse(
        success=True,
        message="User role updated",
        data=UserResponse.model_validate(user),
    )


# ----- Property moderation -----


@router.get(
    "/properties", response_model=BaseResponse[PaginatedResponse[PropertyResponse]]
)
async def list_property_requests(
    current_user: AdminUser,
    db: DBSession,
    storage: Storage,
    pagination: Pagination,
    status: ApprovalStatus | None = None,
):
    """Get listings by approval status, oldest request first."""
    properties, total = await listing_crud.get_properties_by_approval(
        db, status, skip=pagination.offset, limit=pagination.page_size
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=await build_property_responses(properties, storage),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.get("/properties/stats", response_model=BaseResponse[StatusCounts])
async def get_property_stats(current_user: AdminUser, db: DBSession):
    return BaseResponse(success=True, data=await listing_services.property_stats(db))


@router.post(
    "/properties/{property_id}/decision", response_model=BaseResponse[PropertyResponse]
)
async def decide_property(
    property_id: int,
    data: AdminDecision,
    current_user: AdminUser,
    db: DBSession,
    storage: Storage,
):
    """Approve or reject a listing."""
    property_obj = await listing_services.admin_decide(
        db, current_user, property_id, data
    )
    return BaseResponse(
        success=True,
        message=f"Property {property_obj.approval_status.value}",
        data=await build_property_response(property_obj, storage),
    )


# ----- Landlord verification -----


@router.get(
    "/verification-requests",
    response_model=BaseResponse[PaginatedResponse[VerificationResponse]],
)
async def list_verification_requests(
    current_user: AdminUser,
    db: DBSession,
    pagination: Pagination,
    status: ApprovalStatus | None = None,
):
    requests, total = await verification_services.list_requests(
        db, current_user, status, skip=pagination.offset, limit=pagination.page_size
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[VerificationResponse.model_validate(r) for r in requests],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.get("/verification-requests/stats", response_model=BaseResponse[StatusCounts])
async def get_verification_stats(current_user: AdminUser, db: DBSession):
    stats = await verification_services.request_stats(db, current_user)
    return BaseResponse(success=True, data=stats)


@router.get(
    "/verification-requests/{request_id}",
    response_model=BaseResponse[VerificationDetail],
)
async def get_verification_request(
    request_id: int, current_user: AdminUser, db: DBSession, storage: Storage
):
    """Get a request with signed document links and its history."""
    detail = await verification_services.get_request_detail(
        db, storage, current_user, request_id
    )
    return BaseResponse(success=True, data=detail)


@router.post(
    "/verification-requests/{request_id}/approve",
    response_model=BaseResponse[VerificationResponse],
)
async def approve_verification_request(
    request_id: int, data: VerificationApproval, current_user: AdminUser, db: DBSession
):
    """Approve a request. The applicant becomes a landlord."""
    request = await verification_services.approve_request(
        db, current_user, request_id, data.notes
    )
    return BaseResponse(
        success=True,
        message="Landlord request approved",
        data=VerificationResponse.model_validate(request),
    )


@router.post(
    "/verification-requests/{request_id}/reject",
    response_model=BaseResponse[VerificationResponse],
)
async def reject_verification_request(
    request_id: int, data: VerificationRejection, current_user: AdminUser, db: DBSession
):
    request = await verification_services.reject_request(
        db, current_user, request_id, data.reason
    )
    return BaseResponse(
        success=True,
        message="Landlord request rejected",
        data=VerificationResponse.model_validate(request),
    )


# ----- Audit log and sweeps -----


@router.get(
    "/audit-logs", response_model=BaseResponse[PaginatedResponse[AuditLogResponse]]
)
async def list_audit_logs(
    current_user: AdminUser,
    db: DBSession,
    pagination: Pagination,
    action: str | None = None,
    target_type: str | None = None,
    target_id: str | None = None,
):
    logs, total = await services.list_audit_logs(
        db,
        current_user,
        action=action,
        target_type=target_type,
        target_id=target_id,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[AuditLogResponse.model_validate(log) for log in logs],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.post("/sweeps", response_model=BaseResponse[SweepResult])
async def run_sweeps(current_user: AdminUser, db: DBSession):
    """Mark overdue payments and expire finished leases now."""
    result = await services.run_sweeps(db)
    return BaseResponse(success=True, message="Sweeps completed", data=result)
