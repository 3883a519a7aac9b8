"""Landlord verification API routes for applicants.

Admin review endpoints live in the admin module.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ...core.storage import Storage
from ...database import DBSession
from ..auth.dependencies import CurrentUser
from ..commons import BaseResponse
from . import services
from .models import IdType
from .schemas import VerificationResponse, VerificationSubmit

router = APIRouter(prefix="/verification", tags=["Verification"])


def verification_form(
    id_type: Annotated[IdType, Form()],
    id_number: Annotated[str, Form(min_length=5, max_length=100)],
    business_name: Annotated[str | None, Form(max_length=255)] = None,
    business_registration: Annotated[str | None, Form(max_length=255)] = None,
) -> VerificationSubmit:
    """Dependency collecting applicant details from a multipart form."""
    return VerificationSubmit(
        id_type=id_type,
        id_number=id_number,
        business_name=business_name,
        business_registration=business_registration,
    )


VerificationForm = Annotated[VerificationSubmit, Depends(verification_form)]


@router.post("", response_model=BaseResponse[VerificationResponse])
async def submit_verification(
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
    data: VerificationForm,
    id_front: Annotated[UploadFile | None, File()] = None,
    id_back: Annotated[UploadFile | None, File()] = None,
):
    """Apply to become a landlord."""
    request = await services.submit_request(
        db, storage, current_user, data, id_front, id_back
    )
    return BaseResponse(
        success=True,
        message="Verification request submitted",
        data=VerificationResponse.model_validate(request),
    )


@router.post(
    "/{request_id}/resubmit", response_model=BaseResponse[VerificationResponse]
)
async def resubmit_verification(
    request_id: int,
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
    data: VerificationForm,
    id_front: Annotated[UploadFile | None, File()] = None,
    id_back: Annotated[UploadFile | None, File()] = None,
):
    """Apply again after a rejected request."""
    request = await services.resubmit_request(
        db, storage, current_user, request_id, data, id_front, id_back
    )
    return BaseResponse(
        success=True,
        message="Verification request resubmitted",
        data=VerificationResponse.model_validate(request),
    )


@router.get("/status", response_model=BaseResponse[VerificationResponse | None])
async def get_verification_status(current_user: CurrentUser, db: DBSession):
    """Get the caller's latest verification request."""
    request = await services.get_status(db, current_user)
    return BaseResponse(
        success=True,
        data=VerificationResponse.model_validate(request) if request else None,
    )
