"""Listing approval workflow, availability rules and the public listing API."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from rentlink_backend.core.exceptions import (
    AlreadyApprovedError,
    AlreadyPendingError,
    BusinessLogicError,
    NotApprovedError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from rentlink_backend.modules.audit import crud as audit_crud
from rentlink_backend.modules.listings import crud as listing_crud
from rentlink_backend.modules.listings import services as listing_services
from rentlink_backend.modules.listings.models import ApprovalStatus
from rentlink_backend.modules.listings.schemas import (
    AdminDecision,
    DecisionType,
    PropertyCreate,
    PropertyUpdate,
)

from .helpers import actor_for, auth_headers


def new_listing(**overrides) -> PropertyCreate:
    values = {
        "title": "Garden cottage",
        "address": "4 Oak Lane",
        "city": "Durban",
        "price": Decimal("8500.00"),
        "bedrooms": 1,
    }
    values.update(overrides)
    return PropertyCreate(**values)


class TestCreateListing:
    async def test_starts_pending_and_unlisted(self, db, landlord):
        property_obj = await listing_services.create_listing(
            db, actor_for(landlord), new_listing()
        )

        assert property_obj.approval_status == ApprovalStatus.PENDING
        assert property_obj.is_available is False
        assert property_obj.approval_requested_at is not None
        assert property_obj.landlord_id == landlord.id

    async def test_tenant_cannot_create(self, db, tenant):
        with pytest.raises(PermissionDeniedError):
            await listing_services.create_listing(db, actor_for(tenant), new_listing())


class TestModeration:
    async def test_approval_lists_the_property(self, db, admin, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        approved = await listing_services.admin_decide(
            db, actor_for(admin), property_obj.id, AdminDecision(decision=DecisionType.APPROVE)
        )

        assert approved.approval_status == ApprovalStatus.APPROVED
        assert approved.is_available is True
        logs, total = await audit_crud.get_audit_logs(db, action=audit_crud.APPROVE_PROPERTY)
        assert total == 1
        assert logs[0].target_id == str(property_obj.id)

    async def test_rejection_needs_notes(self, db, admin, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        with pytest.raises(ValidationError):
            await listing_services.admin_decide(
                db,
                actor_for(admin),
                property_obj.id,
                AdminDecision(decision=DecisionType.REJECT, notes="  "),
            )

    async def test_rejection_unlists_and_keeps_notes(self, db, admin, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.APPROVED)

        rejected = await listing_services.admin_decide(
            db,
            actor_for(admin),
            property_obj.id,
            AdminDecision(decision=DecisionType.REJECT, notes="Photos are missing"),
        )

        assert rejected.approval_status == ApprovalStatus.REJECTED
        assert rejected.is_available is False
        assert rejected.admin_notes == "Photos are missing"

    async def test_only_admins_moderate(self, db, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        with pytest.raises(PermissionDeniedError):
            await listing_services.admin_decide(
                db,
                actor_for(landlord),
                property_obj.id,
                AdminDecision(decision=DecisionType.APPROVE),
            )


class TestReapproval:
    async def test_rejected_goes_back_to_pending(self, db, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.REJECTED)

        resubmitted = await listing_services.request_reapproval(
            db, actor_for(landlord), property_obj.id
        )

        assert resubmitted.approval_status == ApprovalStatus.PENDING
        assert resubmitted.admin_notes is None

    async def test_approved_property_cannot_be_resubmitted(self, db, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.APPROVED)

        with pytest.raises(AlreadyApprovedError, match="Property is already approved"):
            await listing_services.request_reapproval(db, actor_for(landlord), property_obj.id)

    async def test_pending_property_cannot_be_resubmitted(self, db, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        with pytest.raises(AlreadyPendingError):
            await listing_services.request_reapproval(db, actor_for(landlord), property_obj.id)

    async def test_someone_elses_property_looks_missing(
        self, db, landlord, make_user, make_property
    ):
        other = await make_user("second-landlord@rentlink.co.za")
        property_obj = await make_property(landlord, ApprovalStatus.REJECTED)

        with pytest.raises(NotFoundError, match="not found or unauthorized"):
            await listing_services.request_reapproval(db, actor_for(other), property_obj.id)


class TestAvailability:
    async def test_cannot_list_unapproved_property(self, db, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        with pytest.raises(NotApprovedError):
            await listing_services.set_availability(
                db, actor_for(landlord), property_obj.id, True
            )

    async def test_approved_property_can_be_unlisted_and_relisted(
        self, db, landlord, make_property
    ):
        property_obj = await make_property(landlord, ApprovalStatus.APPROVED)

        unlisted = await listing_services.set_availability(
            db, actor_for(landlord), property_obj.id, False
        )
        assert unlisted.is_available is False

        relisted = await listing_services.set_availability(
            db, actor_for(landlord), property_obj.id, True
        )
        assert relisted.is_available is True

    async def test_update_does_not_touch_approval(self, db, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        updated = await listing_services.update_listing(
            db, actor_for(landlord), property_obj.id, PropertyUpdate(title="Renamed flat")
        )

        assert updated.title == "Renamed flat"
        assert updated.approval_status == ApprovalStatus.PENDING
        assert updated.is_available is False

    def test_update_rejects_null_for_required_fields(self):
        with pytest.raises(SchemaValidationError, match="title cannot be null"):
            PropertyUpdate(title=None)
        with pytest.raises(SchemaValidationError, match="price cannot be null"):
            PropertyUpdate(price=None)

        cleared = PropertyUpdate(description=None, bedrooms=None)
        assert cleared.model_dump(exclude_unset=True) == {"description": None, "bedrooms": None}

    async def test_images_only_accept_keys_under_the_property(
        self, db, landlord, make_property
    ):
        property_obj = await make_property(landlord)

        with pytest.raises(ValidationError):
            await listing_services.add_images(
                db,
                actor_for(landlord),
                property_obj.id,
                ["landlord-verification/7/1700000000000_front.png"],
            )

        key = f"property-images/{property_obj.id}/1700000000000_lounge.png"
        updated = await listing_services.add_images(
            db, actor_for(landlord), property_obj.id, [key]
        )
        assert updated.images == [key]


class TestDeleteListing:
    async def test_refused_when_leases_exist(
        self, db, landlord, tenant, make_property, make_lease
    ):
        property_obj = await make_property(landlord)
        await make_lease(property_obj, tenant)

        with pytest.raises(BusinessLogicError):
            await listing_services.delete_listing(db, actor_for(landlord), property_obj.id)

    async def test_deletes_property_without_leases(self, db, landlord, make_property):
        property_obj = await make_property(landlord)

        await listing_services.delete_listing(db, actor_for(landlord), property_obj.id)

        with pytest.raises(NotFoundError):
            await listing_services.get_owned_property(db, actor_for(landlord), property_obj.id)


class TestPublicListing:
    async def test_unlisted_property_hidden_from_strangers(
        self, db, landlord, tenant, make_property
    ):
        property_obj = await make_property(landlord, ApprovalStatus.PENDING)

        with pytest.raises(NotFoundError):
            await listing_services.get_public_listing(db, property_obj.id, actor_for(tenant))
        with pytest.raises(NotFoundError):
            await listing_services.get_public_listing(db, property_obj.id, None)

        owner_view = await listing_services.get_public_listing(
            db, property_obj.id, actor_for(landlord)
        )
        assert owner_view.id == property_obj.id

    async def test_saved_toggle(self, db, landlord, tenant, make_property):
        property_obj = await make_property(landlord)

        assert await listing_services.toggle_saved(db, actor_for(tenant), property_obj.id) is True
        assert await listing_services.is_saved(db, actor_for(tenant), property_obj.id) is True
        assert await listing_services.toggle_saved(db, actor_for(tenant), property_obj.id) is False
        assert await listing_services.is_saved(db, actor_for(tenant), property_obj.id) is False

    async def test_viewing_records_recently_viewed(self, db, landlord, tenant, make_property):
        first = await make_property(landlord, title="First flat")
        second = await make_property(landlord, title="Second flat")

        await listing_services.get_public_listing(db, first.id, actor_for(tenant))
        await listing_services.get_public_listing(db, second.id, actor_for(tenant))
        await listing_services.get_public_listing(db, first.id, actor_for(tenant))

        viewed = await listing_crud.get_recently_viewed(db, tenant.id)
        assert [p.id for p in viewed] == [first.id, second.id]


class TestListingRoutes:
    async def test_search_returns_only_available(self, client, landlord, make_property):
        await make_property(landlord, ApprovalStatus.APPROVED, title="Listed loft")
        await make_property(landlord, ApprovalStatus.PENDING, title="Pending loft")

        response = await client.get("/api/properties", params={"query": "loft"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert [item["title"] for item in data["items"]] == ["Listed loft"]

    async def test_create_route(self, client, landlord):
        response = await client.post(
            "/api/properties",
            json={
                "title": "Seaside studio",
                "address": "1 Beach Road",
                "city": "Cape Town",
                "price": "9500.00",
            },
            headers=auth_headers(landlord),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Property submitted for approval"
        assert body["data"]["approval_status"] == "pending"
        assert body["data"]["is_available"] is False

    async def test_tenant_cannot_create_via_route(self, client, tenant):
        response = await client.post(
            "/api/properties",
            json={"title": "Nope", "address": "Nowhere", "city": "Nowhere", "price": "1"},
            headers=auth_headers(tenant),
        )

        assert response.status_code == 403
        assert response.json()["success"] is False

    async def test_reapproval_route_conflict(self, client, landlord, make_property):
        property_obj = await make_property(landlord, ApprovalStatus.APPROVED)

        response = await client.post(
            f"/api/properties/{property_obj.id}/request-approval",
            headers=auth_headers(landlord),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Property is already approved"

    async def test_update_with_null_title_is_rejected(self, client, landlord, make_property):
        property_obj = await make_property(landlord, title="Harbour view flat")

        response = await client.put(
            f"/api/properties/{property_obj.id}",
            json={"title": None},
            headers=auth_headers(landlord),
        )

        assert response.status_code == 422
        assert response.json()["success"] is False

        listing = await client.get(f"/api/properties/{property_obj.id}")
        assert listing.json()["data"]["title"] == "Harbour view flat"

    async def test_update_cannot_point_images_at_other_files(
        self, client, storage, landlord, make_property
    ):
        property_obj = await make_property(landlord)
        id_scan = "landlord-verification/9/1700000000000_front_id.png"
        storage.objects[id_scan] = (b"\x89PNG data", "image/png")

        response = await client.put(
            f"/api/properties/{property_obj.id}",
            json={"title": "Updated loft", "images": [id_scan]},
            headers=auth_headers(landlord),
        )
        assert response.status_code == 200

        listing = await client.get(f"/api/properties/{property_obj.id}")

        data = listing.json()["data"]
        assert data["title"] == "Updated loft"
        assert data["images"] == []
        assert data["image_urls"] == []
