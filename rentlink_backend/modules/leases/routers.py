"""Lease API routes."""

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from ...core.storage import Storage
from ...database import DBSession
from ..auth.dependencies import CurrentUser, LandlordUser
from ..commons import BaseResponse
from . import services
from .models import LeaseStatus, TenantDocumentType
from .schemas import (
    LeaseApproval,
    LeaseCreate,
    LeaseDocumentUrl,
    LeaseRejection,
    LeaseResponse,
    LeaseRevisionRequest,
    LeaseTermination,
    LeaseUpdate,
)

router = APIRouter(prefix="/leases", tags=["Leases"])

OptionalFile = Annotated[UploadFile | None, File()]


@router.post("", response_model=BaseResponse[LeaseResponse])
async def create_lease(data: LeaseCreate, current_user: LandlordUser, db: DBSession):
    """Create a draft lease for a tenant."""
    lease = await services.create_draft_lease(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Draft lease created",
        data=LeaseResponse.model_validate(lease),
    )


@router.get("/landlord", response_model=BaseResponse[list[LeaseResponse]])
async def list_landlord_leases(
    current_user: LandlordUser, db: DBSession, status: LeaseStatus | None = None
):
    """Get leases on the caller's properties."""
    leases = await services.list_landlord_leases(db, current_user, status)
    return BaseResponse(
        success=True, data=[LeaseResponse.model_validate(lease) for lease in leases]
    )


@router.get("/tenant", response_model=BaseResponse[list[LeaseResponse]])
async def list_tenant_leases(
    current_user: CurrentUser, db: DBSession, status: LeaseStatus | None = None
):
    """Get leases where the caller is the tenant."""
    leases = await services.list_tenant_leases(db, current_user, status)
    return BaseResponse(
        success=True, data=[LeaseResponse.model_validate(lease) for lease in leases]
    )


@router.get("/{lease_id}", response_model=BaseResponse[LeaseResponse])
async def get_lease(lease_id: int, current_user: CurrentUser, db: DBSession):
    lease = await services.get_lease(db, current_user, lease_id)
    return BaseResponse(success=True, data=LeaseResponse.model_validate(lease))


@router.put("/{lease_id}", response_model=BaseResponse[LeaseResponse])
async def update_lease(
    lease_id: int, data: LeaseUpdate, current_user: LandlordUser, db: DBSession
):
    """Edit a draft lease."""
    lease = await services.update_draft_lease(db, current_user, lease_id, data)
    return BaseResponse(
        success=True,
        message="Lease updated successfully",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/send", response_model=BaseResponse[LeaseResponse])
async def send_lease(lease_id: int, current_user: LandlordUser, db: DBSession):
    """Send a lease to the tenant for signing."""
    lease = await services.send_to_tenant(db, current_user, lease_id)
    return BaseResponse(
        success=True,
        message="Lease sent to tenant",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/documents", response_model=BaseResponse[LeaseResponse])
async def upload_lease_document(
    lease_id: int,
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
    document_type: Annotated[TenantDocumentType, Form()],
    file: Annotated[UploadFile, File()],
):
    """Upload a supporting document before signing."""
    lease = await services.upload_lease_document(
        db, storage, current_user, lease_id, document_type, file
    )
    return BaseResponse(
        success=True,
        message="Document uploaded",
        data=LeaseResponse.model_validate(lease),
    )


@router.get("/{lease_id}/documents", response_model=BaseResponse[list[LeaseDocumentUrl]])
async def get_lease_documents(
    lease_id: int, current_user: CurrentUser, db: DBSession, storage: Storage
):
    """Get signed links to the tenant's documents (valid for one hour)."""
    urls = await services.get_document_urls(db, storage, current_user, lease_id)
    return BaseResponse(success=True, data=urls)


@router.post("/{lease_id}/sign", response_model=BaseResponse[LeaseResponse])
async def sign_lease(
    lease_id: int,
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
    signature: Annotated[str | None, Form()] = None,
    id_front: OptionalFile = None,
    id_back: OptionalFile = None,
    proof_of_income: OptionalFile = None,
    bank_statement: OptionalFile = None,
):
    """Sign a lease as the tenant, attaching ID documents."""
    lease = await services.submit_signed_lease(
        db,
        storage,
        current_user,
        lease_id,
        signature,
        {
            TenantDocumentType.ID_FRONT: id_front,
            TenantDocumentType.ID_BACK: id_back,
            TenantDocumentType.PROOF_OF_INCOME: proof_of_income,
            TenantDocumentType.BANK_STATEMENT: bank_statement,
        },
    )
    return BaseResponse(
        success=True,
        message="Lease signed and submitted to landlord",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/approve", response_model=BaseResponse[LeaseResponse])
async def approve_lease(
    lease_id: int, data: LeaseApproval, current_user: LandlordUser, db: DBSession
):
    """Approve a signed lease. Creates the payment schedule and deposit."""
    lease = await services.approve_lease(
        db, current_user, lease_id, data.landlord_signature, data.notes
    )
    return BaseResponse(
        success=True,
        message="Lease approved",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/request-revision", response_model=BaseResponse[LeaseResponse])
async def request_lease_revision(
    lease_id: int, data: LeaseRevisionRequest, current_user: LandlordUser, db: DBSession
):
    lease = await services.request_revision(db, current_user, lease_id, data.notes)
    return BaseResponse(
        success=True,
        message="Revision requested",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/reject", response_model=BaseResponse[LeaseResponse])
async def reject_lease(
    lease_id: int, data: LeaseRejection, current_user: LandlordUser, db: DBSession
):
    lease = await services.reject_lease(db, current_user, lease_id, data.reason)
    return BaseResponse(
        success=True,
        message="Lease rejected",
        data=LeaseResponse.model_validate(lease),
    )


@router.post("/{lease_id}/terminate", response_model=BaseResponse[LeaseResponse])
async def terminate_lease(
    lease_id: int,
    current_user: CurrentUser,
    db: DBSession,
    data: LeaseTermination | None = None,
):
    """Terminate an approved lease (landlord or admin)."""
    lease = await services.terminate_lease(
        db, current_user, lease_id, data.reason if data else None
    )
    return BaseResponse(
        success=True,
        message="Lease terminated",
        data=LeaseResponse.model_validate(lease),
    )
