"""Admin dashboard, role management, audit trail and sweeps."""

import asyncio
from datetime import date

import pytest

from rentlink_backend.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from rentlink_backend.modules.admin import services as admin_services
from rentlink_backend.modules.admin.scheduler import SweepScheduler
from rentlink_backend.modules.audit import crud as audit_crud
from rentlink_backend.modules.auth.models import UserRole
from rentlink_backend.modules.leases.models import LeaseStatus
from rentlink_backend.modules.listings.models import ApprovalStatus
from rentlink_backend.modules.payments import services as payment_services

from .helpers import actor_for, auth_headers


class TestPlatformStats:
    async def test_counts(self, db, admin, landlord, tenant, make_property, make_lease):
        listing = await make_property(landlord)
        await make_property(landlord, title="Second flat")
        await make_lease(listing, tenant, LeaseStatus.APPROVED)
        await make_lease(listing, tenant, LeaseStatus.DRAFT)

        stats = await admin_services.platform_stats(db, actor_for(admin))

        assert stats.users == 3
        assert stats.properties == 2
        assert stats.approved_leases == 1
        assert stats.inquiries == 0

    async def test_admins_only(self, db, landlord):
        with pytest.raises(PermissionDeniedError):
            await admin_services.platform_stats(db, actor_for(landlord))


class TestUserRoles:
    async def test_role_change_is_audited(self, db, admin, tenant):
        updated = await admin_services.update_user_role(
            db, actor_for(admin), tenant.id, UserRole.LANDLORD
        )

        assert updated.role == UserRole.LANDLORD
        logs, total = await admin_services.list_audit_logs(
            db, actor_for(admin), action=audit_crud.UPDATE_USER_ROLE
        )
        assert total == 1
        assert logs[0].target_id == str(tenant.id)
        assert logs[0].details == {"from_role": "tenant", "to_role": "landlord"}

    async def test_cannot_change_own_role(self, db, admin):
        with pytest.raises(ValidationError, match="your own role"):
            await admin_services.update_user_role(
                db, actor_for(admin), admin.id, UserRole.TENANT
            )

    async def test_unknown_user(self, db, admin):
        with pytest.raises(NotFoundError):
            await admin_services.update_user_role(
                db, actor_for(admin), 999, UserRole.LANDLORD
            )

    async def test_list_users_by_role(self, db, admin, landlord, tenant):
        users, total = await admin_services.list_users(
            db, actor_for(admin), role=UserRole.LANDLORD
        )

        assert total == 1
        assert users[0].id == landlord.id


class TestSweeps:
    async def test_sweeps_expire_and_flag_overdue(
        self, db, landlord, tenant, make_property, make_lease
    ):
        listing = await make_property(landlord, is_available=False)
        lease = await make_lease(listing, tenant, LeaseStatus.APPROVED)
        await payment_services.generate_recurring_payments(db, lease.id)
        await db.commit()

        result = await admin_services.run_sweeps(db, today=date(2024, 6, 15))

        assert result.overdue_payments == 4
        assert result.expired_leases == 1

    async def test_nothing_to_do(self, db):
        result = await admin_services.run_sweeps(db, today=date(2024, 6, 15))

        assert result.overdue_payments == 0
        assert result.expired_leases == 0


class TestAdminRoutes:
    async def test_stats_route(self, client, admin):
        response = await client.get("/api/admin/stats", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["data"]["users"] == 1

    async def test_non_admin_gets_403(self, client, landlord):
        response = await client.get("/api/admin/stats", headers=auth_headers(landlord))

        assert response.status_code == 403
        assert response.json()["success"] is False

    async def test_role_route(self, client, admin, tenant):
        response = await client.patch(
            f"/api/admin/users/{tenant.id}/role",
            json={"role": "landlord"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "landlord"

    async def test_sweeps_route(self, client, admin, landlord, tenant, make_property, make_lease):
        listing = await make_property(landlord, is_available=False)
        await make_lease(listing, tenant, LeaseStatus.APPROVED)

        response = await client.post("/api/admin/sweeps", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["data"] == {"overdue_payments": 0, "expired_leases": 1}

    async def test_audit_log_route(self, client, admin, landlord, make_property):
        pending = await make_property(landlord, approval_status=ApprovalStatus.PENDING)
        await client.post(
            f"/api/admin/properties/{pending.id}/decision",
            json={"decision": "approve"},
            headers=auth_headers(admin),
        )

        response = await client.get(
            "/api/admin/audit-logs",
            params={"action": audit_crud.APPROVE_PROPERTY},
            headers=auth_headers(admin),
        )

        assert response.json()["data"]["total"] == 1

    async def test_demoted_admin_token_is_refused(self, client, admin, make_user):
        deputy = await make_user("deputy.co.za", UserRole.ADMIN, "Dana")
        deputy_headers = auth_headers(deputy)

        demoted = await client.patch(
            f"/api/admin/users/{deputy.id}/role",
            json={"role": "tenant"},
            headers=auth_headers(admin),
        )
        assert demoted.status_code == 200

        response = await client.get("/api/admin/stats", headers=deputy_headers)

        assert response.status_code == 403
        assert response.json()["success"] is False


class TestSweepScheduler:
    async def test_runs_immediately_and_stops(self, monkeypatch):
        calls = []

        async def fake_run_once():
            calls.append(1)

        scheduler = SweepScheduler(interval_seconds=3600)
        monkeypatch.setattr(scheduler, "run_once", fake_run_once)

        scheduler.start()
        for _ in range(3):
            await asyncio.sleep(0)

        assert scheduler.running
        assert calls == [1]

        await scheduler.stop()
        assert not scheduler.running
