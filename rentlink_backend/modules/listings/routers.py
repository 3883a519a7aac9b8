"""Listing API routes."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from ...config import settings
from ...core.storage import PROPERTY_IMAGES_PREFIX, Storage, StorageService
from ...core.uploads import IMAGE_TYPES, validate_upload
from ...core.utils import timestamp_ms
from ...database import DBSession
from ..auth.dependencies import CurrentUser, LandlordUser, OptionalUser
from ..commons import (
    BaseResponse,
    PaginatedResponse,
    PaginationParams,
    pagination_params,
)
from . import crud, services
from .models import Property
from .schemas import (
    AvailabilityUpdate,
    PropertyCreate,
    PropertyResponse,
    PropertySearchParams,
    PropertyUpdate,
    SavedToggleResponse,
)

router = APIRouter(prefix="/properties", tags=["Properties"])

Pagination = Annotated[PaginationParams, Depends(pagination_params)]


async def build_property_response(
    property_obj: Property, storage: StorageService
) -> PropertyResponse:
    """Property response with image keys resolved to signed URLs."""
    response = PropertyResponse.model_validate(property_obj)
    urls = await asyncio.gather(
        *(storage.signed_url(key) for key in property_obj.images or [])
    )
    response.image_urls = [url for url in urls if url]
    return response


async def build_property_responses(
    properties: list[Property], storage: StorageService
) -> list[PropertyResponse]:
    return [await build_property_response(p, storage) for p in properties]


@router.get("", response_model=BaseResponse[PaginatedResponse[PropertyResponse]])
async def search_properties(
    db: DBSession,
    storage: Storage,
    pagination: Pagination,
    filters: Annotated[PropertySearchParams, Depends()],
):
    """Search listed properties."""
    properties, total = await crud.search_properties(
        db, filters, skip=pagination.offset, limit=pagination.page_size
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


@router.get("/mine", response_model=BaseResponse[list[PropertyResponse]])
async def list_my_properties(
    current_user: LandlordUser, db: DBSession, storage: Storage
):
    """Get the caller's own listings, including unlisted and pending ones."""
    properties = await crud.get_properties_by_landlord(db, current_user.id)
    return BaseResponse(
        success=True, data=await build_property_responses(properties, storage)
    )


@router.get("/saved", response_model=BaseResponse[list[PropertyResponse]])
async def list_saved_properties(
    current_user: CurrentUser, db: DBSession, storage: Storage
):
    """Get properties saved by the caller."""
    properties = await crud.get_saved_properties(db, current_user.id)
    return BaseResponse(
        success=True, data=await build_property_responses(properties, storage)
    )


@router.get("/recently-viewed", response_model=BaseResponse[list[PropertyResponse]])
async def list_recently_viewed(
    current_user: CurrentUser, db: DBSession, storage: Storage, limit: int = 10
):
    """Get the caller's recently viewed properties, newest first."""
    properties = await crud.get_recently_viewed(
        db, current_user.id, limit=max(1, min(limit, crud.RECENTLY_VIEWED_LIMIT))
    )
    return BaseResponse(
        success=True, data=await build_property_responses(properties, storage)
    )


@router.post("", response_model=BaseResponse[PropertyResponse])
async def create_property(
    data: PropertyCreate, current_user: LandlordUser, db: DBSession, storage: Storage
):
    """Create a listing. It stays unlisted until an admin approves it."""
    property_obj = await services.create_listing(db, current_user, data)

    return BaseResponse(
        success=True,
        message="Property submitted for approval",
        data=await build_property_response(property_obj, storage),
    )


@router.get("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def get_property(
    property_id: int, current_user: OptionalUser, db: DBSession, storage: Storage
):
    """Get a property by ID."""
    property_obj = await services.get_public_listing(db, property_id, current_user)
    return BaseResponse(
        success=True, data=await build_property_response(property_obj, storage)
    )


@router.put("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def update_property(
    property_id: int,
    data: PropertyUpdate,
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
):
    """Update a property."""
    property_obj = await services.update_listing(db, current_user, property_id, data)

    return BaseResponse(
        success=True,
        message="Property updated successfully",
        data=await build_property_response(property_obj, storage),
    )


@router.delete("/{property_id}", response_model=BaseResponse[None])
async def delete_property(property_id: int, current_user: CurrentUser, db: DBSession):
    """Delete a property."""
    await services.delete_listing(db, current_user, property_id)
    return BaseResponse(success=True, message="Property deleted successfully")


@router.post("/{property_id}/images", response_model=BaseResponse[PropertyResponse])
async def upload_property_images(
    property_id: int,
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
    files: list[UploadFile] = File(...),
):
    """Upload one or more images for a property."""
    # Ownership first, so nothing is uploaded for a foreign property
    await services.get_owned_property(db, current_user, property_id)

    keys = []
    for index, file in enumerate(files):
        upload = await validate_upload(
            file, IMAGE_TYPES, settings.max_upload_size_mb, field=f"files[{index}]"
        )
        key = f"{PROPERTY_IMAGES_PREFIX}/{property_id}/{timestamp_ms()}_{upload.filename}"
        keys.append(await storage.upload(key, upload.content, upload.content_type))

    property_obj = await services.add_images(db, current_user, property_id, keys)

    return BaseResponse(
        success=True,
        message=f"{len(keys)} image(s) uploaded",
        data=await build_property_response(property_obj, storage),
    )


@router.post(
    "/{property_id}/request-approval", response_model=BaseResponse[PropertyResponse]
)
async def request_property_approval(
    property_id: int, current_user: CurrentUser, db: DBSession, storage: Storage
):
    """Resubmit a rejected property for approval."""
    property_obj = await services.request_reapproval(db, current_user, property_id)

    return BaseResponse(
        success=True,
        message="Property resubmitted for approval",
        data=await build_property_response(property_obj, storage),
    )


@router.patch(
    "/{property_id}/availability", response_model=BaseResponse[PropertyResponse]
)
async def update_availability(
    property_id: int,
    data: AvailabilityUpdate,
    current_user: CurrentUser,
    db: DBSession,
    storage: Storage,
):
    """List or unlist an approved property."""
    property_obj = await services.set_availability(
        db, current_user, property_id, data.is_available
    )

    return BaseResponse(
        success=True,
        message="Property listed" if data.is_available else "Property unlisted",
        data=await build_property_response(property_obj, storage),
    )


@router.post("/{property_id}/save", response_model=BaseResponse[SavedToggleResponse])
async def toggle_saved_property(
    property_id: int, current_user: CurrentUser, db: DBSession
):
    """Save or unsave a property."""
    saved = await services.toggle_saved(db, current_user, property_id)

    return BaseResponse(
        success=True,
        message="Property saved" if saved else "Property removed from saved",
        data=SavedToggleResponse(property_id=property_id, saved=saved),
    )


@router.get("/{property_id}/saved", response_model=BaseResponse[SavedToggleResponse])
async def get_saved_state(property_id: int, current_user: CurrentUser, db: DBSession):
    """Whether the caller has saved a property."""
    saved = await services.is_saved(db, current_user, property_id)
    return BaseResponse(
        success=True, data=SavedToggleResponse(property_id=property_id, saved=saved)
    )
