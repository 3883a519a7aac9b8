"""Lease workflow: drafting, signing with documents, review and ending."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from rentlink_backend.core.exceptions import (
    InvalidLeaseTransition,
    MissingDocumentsError,
    MissingSignatureError,
    NotFoundError,
    ValidationError,
)
from rentlink_backend.modules.audit import crud as audit_crud
from rentlink_backend.modules.deposits import crud as deposit_crud
from rentlink_backend.modules.deposits.models import DepositStatus
from rentlink_backend.modules.leases import crud as lease_crud
from rentlink_backend.modules.leases import services as lease_services
from rentlink_backend.modules.leases.models import LeaseStatus, TenantDocumentType
from rentlink_backend.modules.leases.schemas import LeaseCreate, LeaseUpdate
from rentlink_backend.modules.listings import crud as listing_crud
from rentlink_backend.modules.listings.models import ApprovalStatus
from rentlink_backend.modules.payments import crud as payment_crud

from .helpers import actor_for, auth_headers, make_upload

def id_documents():
    return {
        TenantDocumentType.ID_FRONT: make_upload("front.png"),
        TenantDocumentType.ID_BACK: make_upload("back.pdf", "application/pdf", b"%PDF-1.7"),
    }


class TestDrafting:
    async def test_create_by_tenant_email(self, db, landlord, tenant, make_property):
        property_obj = await make_property(landlord)

        lease = await lease_services.create_draft_lease(
            db,
            actor_for(landlord),
            LeaseCreate(
                property_id=property_obj.id,
                tenant_email=tenant.email,
                start_date=date(2024, 1, 1),
                end_date=date(2024, 12, 31),
                monthly_rent=Decimal("1000.00"),
                deposit=Decimal("2000.00"),
            ),
        )

        assert lease.status == LeaseStatus.DRAFT
        assert lease.tenant_id == tenant.id
        assert lease.landlord_id == landlord.id
        assert lease.lease_document["title"].endswith(property_obj.title)
        assert len(lease.lease_document["clauses"]) == 7
        assert lease.lease_document["notice_period_days"] == 30

    async def test_unknown_tenant(self, db, landlord, make_property):
        property_obj = await make_property(landlord)

        with pytest.raises(NotFoundError, match="Tenant not found"):
            await lease_services.create_draft_lease(
                db,
                actor_for(landlord),
                LeaseCreate(
                    property_id=property_obj.id,
                    tenant_email="nobody@rentlink.co.za",
                    start_date=date(2024, 1, 1),
                    end_date=date(2024, 12, 31),
                    monthly_rent=Decimal("1000.00"),
                ),
            )

    async def test_cannot_lease_to_yourself(self, db, landlord, make_property):
        property_obj = await make_property(landlord)

        with pytest.raises(ValidationError):
            await lease_services.create_draft_lease(
                db,
                actor_for(landlord),
                LeaseCreate(
                    property_id=property_obj.id,
                    tenant_id=landlord.id,
                    start_date=date(2024, 1, 1),
                    end_date=date(2024, 12, 31),
                    monthly_rent=Decimal("1000.00"),
                ),
            )

    async def test_end_must_follow_start(self, db, landlord, tenant, make_property):
        property_obj = await make_property(landlord)

        with pytest.raises(ValidationError, match="End date"):
            await lease_services.create_draft_lease(
                db,
                actor_for(landlord),
                LeaseCreate(
                    property_id=property_obj.id,
                    tenant_id=tenant.id,
                    start_date=date(2024, 6, 1),
                    end_date=date(2024, 6, 1),
                    monthly_rent=Decimal("1000.00"),
                ),
            )

    async def test_only_drafts_are_editable(
        self, db, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )

        with pytest.raises(InvalidLeaseTransition):
            await lease_services.update_draft_lease(
                db, actor_for(landlord), lease.id, LeaseUpdate(monthly_rent=Decimal("900"))
            )

    def test_update_rejects_null_terms(self):
        with pytest.raises(SchemaValidationError, match="monthly_rent cannot be null"):
            LeaseUpdate(monthly_rent=None)
        with pytest.raises(SchemaValidationError, match="end_date cannot be null"):
            LeaseUpdate(end_date=None)

        assert LeaseUpdate(lease_document=None).model_dump(exclude_unset=True) == {
            "lease_document": None
        }

    async def test_send_to_tenant(self, db, landlord, tenant, make_property, make_lease):
        lease = await make_lease(await make_property(landlord), tenant)

        sent = await lease_services.send_to_tenant(db, actor_for(landlord), lease.id)

        assert sent.status == LeaseStatus.SENT_TO_TENANT
        assert sent.sent_at is not None
        with pytest.raises(InvalidLeaseTransition):
            await lease_services.send_to_tenant(db, actor_for(landlord), lease.id)

    async def test_send_requires_clauses(self, db, landlord, tenant, make_property, make_lease):
        lease = await make_lease(await make_property(landlord), tenant)
        await lease_crud.update_lease(db, lease, lease_document={"title": "Empty", "clauses": []})
        await db.commit()

        with pytest.raises(ValidationError):
            await lease_services.send_to_tenant(db, actor_for(landlord), lease.id)


class TestSigning:
    async def test_missing_id_documents_leaves_lease_unchanged(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )

        with pytest.raises(MissingDocumentsError) as exc_info:
            await lease_services.submit_signed_lease(
                db, storage, actor_for(tenant), lease.id, "Tom User", {}
            )

        assert exc_info.value.missing == ["id_front", "id_back"]
        reloaded = await lease_crud.get_lease_by_id(db, lease.id)
        assert reloaded.status == LeaseStatus.SENT_TO_TENANT
        assert reloaded.tenant_signature is None
        assert storage.objects == {}

    async def test_missing_signature(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )

        with pytest.raises(MissingSignatureError):
            await lease_services.submit_signed_lease(
                db, storage, actor_for(tenant), lease.id, "   ", id_documents()
            )

        assert storage.objects == {}

    async def test_disallowed_file_type(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )
        documents = id_documents()
        documents[TenantDocumentType.ID_BACK] = make_upload("back.exe", "application/x-msdownload")

        with pytest.raises(ValidationError):
            await lease_services.submit_signed_lease(
                db, storage, actor_for(tenant), lease.id, "Tom User", documents
            )

        reloaded = await lease_crud.get_lease_by_id(db, lease.id)
        assert reloaded.status == LeaseStatus.SENT_TO_TENANT

    async def test_sign_with_documents(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )

        signed = await lease_services.submit_signed_lease(
            db, storage, actor_for(tenant), lease.id, "Tom User", id_documents()
        )

        assert signed.status == LeaseStatus.TENANT_SIGNED
        assert signed.tenant_signature == "Tom User"
        assert signed.signed_at is not None
        assert {d["type"] for d in signed.tenant_documents} == {"id_front", "id_back"}
        assert len(storage.objects) == 2
        assert all(key.startswith(f"lease-documents/{lease.id}/") for key in storage.objects)

    async def test_earlier_upload_counts_towards_required_set(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )
        await lease_services.upload_lease_document(
            db, storage, actor_for(tenant), lease.id, TenantDocumentType.ID_FRONT, make_upload()
        )

        signed = await lease_services.submit_signed_lease(
            db,
            storage,
            actor_for(tenant),
            lease.id,
            "Tom User",
            {TenantDocumentType.ID_BACK: make_upload("back.png")},
        )

        assert signed.status == LeaseStatus.TENANT_SIGNED
        assert sorted(d["type"] for d in signed.tenant_documents) == ["id_back", "id_front"]

    async def test_reupload_replaces_same_type(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )
        for name in ("first.png", "second.png"):
            updated = await lease_services.upload_lease_document(
                db,
                storage,
                actor_for(tenant),
                lease.id,
                TenantDocumentType.PROOF_OF_INCOME,
                make_upload(name),
            )

        assert len(updated.tenant_documents) == 1
        assert updated.tenant_documents[0]["name"] == "second.png"

    async def test_landlord_cannot_sign(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )

        with pytest.raises(NotFoundError):
            await lease_services.submit_signed_lease(
                db, storage, actor_for(landlord), lease.id, "Lena", id_documents()
            )

    async def test_cannot_sign_a_draft(
        self, db, storage, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(await make_property(landlord), tenant)

        with pytest.raises(InvalidLeaseTransition):
            await lease_services.submit_signed_lease(
                db, storage, actor_for(tenant), lease.id, "Tom User", id_documents()
            )


class TestReview:
    async def test_approval_sets_up_payments_and_deposit(
        self, db, landlord, tenant, make_property, make_lease
    ):
        property_obj = await make_property(landlord)
        lease = await make_lease(property_obj, tenant, LeaseStatus.TENANT_SIGNED)

        approved = await lease_services.approve_lease(
            db, actor_for(landlord), lease.id, landlord_signature="Lena User"
        )

        assert approved.status == LeaseStatus.APPROVED
        assert approved.approved_at is not None
        assert approved.landlord_signature == "Lena User"

        property_obj = await listing_crud.get_property_by_id(db, property_obj.id)
        assert property_obj.is_available is False

        payments = await payment_crud.get_payments_by_lease(db, lease.id)
        assert [p.due_date for p in payments] == [
            date(2024, 1, 1),
            date(2024, 2, 1),
            date(2024, 3, 1),
            date(2024, 4, 1),
            date(2024, 5, 1),
        ]

        deposit = await deposit_crud.get_deposit_by_lease(db, lease.id)
        assert deposit.status == DepositStatus.PENDING
        assert deposit.amount == Decimal("2000.00")

    async def test_no_deposit_record_without_deposit(
        self, db, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.TENANT_SIGNED, deposit=Decimal("0")
        )

        await lease_services.approve_lease(db, actor_for(landlord), lease.id)

        assert await deposit_crud.get_deposit_by_lease(db, lease.id) is None

    async def test_cannot_approve_unsigned(
        self, db, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.SENT_TO_TENANT
        )

        with pytest.raises(InvalidLeaseTransition):
            await lease_services.approve_lease(db, actor_for(landlord), lease.id)

        assert await payment_crud.get_payments_by_lease(db, lease.id) == []

    async def test_revision_clears_signature_and_documents(
        self, db, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(
            await make_property(landlord),
            tenant,
            LeaseStatus.TENANT_SIGNED,
            tenant_signature="Tom User",
            tenant_documents=[{"type": "id_front", "key": "k1", "name": "front.png"}],
        )

        revised = await lease_services.request_revision(
            db, actor_for(landlord), lease.id, "Please initial clause 3"
        )

        assert revised.status == LeaseStatus.REVISION_REQUESTED
        assert revised.tenant_signature is None
        assert revised.tenant_documents == []
        assert revised.landlord_notes == "Please initial clause 3"

    async def test_revision_needs_notes(self, db, landlord, tenant, make_property, make_lease):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.TENANT_SIGNED
        )

        with pytest.raises(ValidationError):
            await lease_services.request_revision(db, actor_for(landlord), lease.id, "")

    async def test_reject_keeps_reason(self, db, landlord, tenant, make_property, make_lease):
        lease = await make_lease(
            await make_property(landlord), tenant, LeaseStatus.TENANT_SIGNED
        )

        rejected = await lease_services.reject_lease(
            db, actor_for(landlord), lease.id, "Income too low"
        )

        assert rejected.status == LeaseStatus.REJECTED
        assert rejected.landlord_notes == "Income too low"


class TestEndingLeases:
    async def test_terminate_relists_property(
        self, db, landlord, tenant, make_property, make_lease
    ):
        property_obj = await make_property(landlord, ApprovalStatus.APPROVED, is_available=False)
        lease = await make_lease(property_obj, tenant, LeaseStatus.APPROVED)

        terminated = await lease_services.terminate_lease(
            db, actor_for(landlord), lease.id, "Tenant moved abroad"
        )

        assert terminated.status == LeaseStatus.TERMINATED
        assert terminated.terminated_at is not None
        property_obj = await listing_crud.get_property_by_id(db, property_obj.id)
        assert property_obj.is_available is True

    async def test_tenant_cannot_terminate(
        self, db, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(await make_property(landlord), tenant, LeaseStatus.APPROVED)

        with pytest.raises(NotFoundError):
            await lease_services.terminate_lease(db, actor_for(tenant), lease.id)

    async def test_admin_termination_is_audited(
        self, db, admin, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(await make_property(landlord), tenant, LeaseStatus.APPROVED)

        await lease_services.terminate_lease(db, actor_for(admin), lease.id, "Fraud report")

        logs, total = await audit_crud.get_audit_logs(db, action=audit_crud.TERMINATE_LEASE)
        assert total == 1
        assert logs[0].details["landlord_id"] == landlord.id

    async def test_expire_finished_leases(
        self, db, landlord, tenant, make_property, make_lease
    ):
        property_obj = await make_property(landlord, ApprovalStatus.APPROVED, is_available=False)
        lease = await make_lease(property_obj, tenant, LeaseStatus.APPROVED)

        assert await lease_services.expire_leases(db, today=date(2024, 6, 1)) == 0
        assert await lease_services.expire_leases(db, today=date(2024, 6, 2)) == 1

        reloaded = await lease_crud.get_lease_by_id(db, lease.id)
        assert reloaded.status == LeaseStatus.EXPIRED
        property_obj = await listing_crud.get_property_by_id(db, property_obj.id)
        assert property_obj.is_available is True


class TestLeaseRoutes:
    async def test_full_signing_flow(
        self, client, storage, landlord, tenant, make_property
    ):
        property_obj = await make_property(landlord)

        created = await client.post(
            "/api/leases",
            json={
                "property_id": property_obj.id,
                "tenant_email": tenant.email,
                "start_date": "2024-01-01",
                "end_date": "2024-06-01",
                "monthly_rent": "1000.00",
                "deposit": "2000.00",
            },
            headers=auth_headers(landlord),
        )
        assert created.status_code == 200
        lease_id = created.json()["data"]["id"]

        sent = await client.post(f"/api/leases/{lease_id}/send", headers=auth_headers(landlord))
        assert sent.json()["data"]["status"] == "sent_to_tenant"

        unsigned = await client.post(
            f"/api/leases/{lease_id}/sign",
            data={"signature": "Tom User"},
            headers=auth_headers(tenant),
        )
        assert unsigned.status_code == 400
        assert "id_front" in unsigned.json()["error"]

        signed = await client.post(
            f"/api/leases/{lease_id}/sign",
            data={"signature": "Tom User"},
            files={
                "id_front": ("front.png", b"\x89PNG front", "image/png"),
                "id_back": ("back.png", b"\x89PNG back", "image/png"),
            },
            headers=auth_headers(tenant),
        )
        assert signed.status_code == 200
        assert signed.json()["data"]["status"] == "tenant_signed"

        documents = await client.get(
            f"/api/leases/{lease_id}/documents", headers=auth_headers(landlord)
        )
        assert {d["type"] for d in documents.json()["data"]} == {"id_front", "id_back"}
        assert all(d["url"].startswith("https://storage.test/") for d in documents.json()["data"])

        approved = await client.post(
            f"/api/leases/{lease_id}/approve", json={}, headers=auth_headers(landlord)
        )
        assert approved.status_code == 200
        assert approved.json()["data"]["status"] == "approved"

        payments = await client.get(
            f"/api/payments/leases/{lease_id}", headers=auth_headers(tenant)
        )
        assert len(payments.json()["data"]) == 5

    async def test_stranger_sees_not_found(
        self, client, landlord, tenant, make_user, make_property, make_lease
    ):
        stranger = await make_user("stranger@rentlink.co.za")
        lease = await make_lease(await make_property(landlord), tenant)

        response = await client.get(f"/api/leases/{lease.id}", headers=auth_headers(stranger))

        assert response.status_code == 404
        assert response.json()["error"] == "Lease not found or unauthorized"

    async def test_null_rent_is_rejected_and_lease_unchanged(
        self, client, landlord, tenant, make_property, make_lease
    ):
        lease = await make_lease(await make_property(landlord), tenant)

        response = await client.put(
            f"/api/leases/{lease.id}",
            json={"monthly_rent": None},
            headers=auth_headers(landlord),
        )

        assert response.status_code == 422
        assert response.json()["message"] == "Request validation failed"

        fetched = await client.get(f"/api/leases/{lease.id}", headers=auth_headers(landlord))
        assert Decimal(fetched.json()["data"]["monthly_rent"]) == Decimal("1000.00")
