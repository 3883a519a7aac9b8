"""Deposit escrow: one record per lease, confirmation and release arithmetic."""

from decimal import Decimal

import pytest

from rentlink_backend.core.exceptions import (
    BusinessLogicError,
    DepositAlreadyExistsError,
    NotFoundError,
    ValidationError,
)
from rentlink_backend.modules.deposits import services as deposit_services
from rentlink_backend.modules.deposits.models import DepositPaymentMethod, DepositStatus
from rentlink_backend.modules.leases.models import LeaseStatus

from .helpers import actor_for, auth_headers


@pytest.fixture
async def lease(landlord, tenant, make_property, make_lease):
    return await make_lease(await make_property(landlord), tenant, LeaseStatus.APPROVED)


@pytest.fixture
async def held_deposit(db, landlord, lease):
    deposit = await deposit_services.create_for_lease(db, actor_for(landlord), lease.id)
    return await deposit_services.confirm_deposit(
        db, actor_for(landlord), deposit.id, DepositPaymentMethod.EFT, "REF-001"
    )


class TestCreateDeposit:
    async def test_defaults_to_lease_deposit(self, db, landlord, lease):
        deposit = await deposit_services.create_for_lease(db, actor_for(landlord), lease.id)

        assert deposit.status == DepositStatus.PENDING
        assert deposit.amount == Decimal("2000.00")
        assert deposit.tenant_id == lease.tenant_id
        assert deposit.deduction_amount == Decimal("0")

    async def test_one_deposit_per_lease(self, db, landlord, lease):
        await deposit_services.create_for_lease(db, actor_for(landlord), lease.id)

        with pytest.raises(DepositAlreadyExistsError):
            await deposit_services.create_for_lease(
                db, actor_for(landlord), lease.id, Decimal("500.00")
            )

    async def test_tenant_cannot_create(self, db, tenant, lease):
        with pytest.raises(NotFoundError):
            await deposit_services.create_for_lease(db, actor_for(tenant), lease.id)


class TestConfirmDeposit:
    async def test_pending_becomes_held(self, held_deposit):
        assert held_deposit.status == DepositStatus.HELD
        assert held_deposit.payment_method == DepositPaymentMethod.EFT
        assert held_deposit.payment_reference == "REF-001"
        assert held_deposit.paid_at is not None

    async def test_cannot_confirm_twice(self, db, landlord, held_deposit):
        with pytest.raises(BusinessLogicError, match="not pending"):
            await deposit_services.confirm_deposit(
                db, actor_for(landlord), held_deposit.id, DepositPaymentMethod.CASH
            )


class TestReleaseDeposit:
    async def test_full_release(self, db, landlord, held_deposit):
        deposit, released, deducted = await deposit_services.release_deposit(
            db, actor_for(landlord), held_deposit.id
        )

        assert deposit.status == DepositStatus.RELEASED
        assert released == Decimal("2000.00")
        assert deducted == Decimal("0")
        assert deposit.released_at is not None

    async def test_partial_release(self, db, landlord, held_deposit):
        deposit, released, deducted = await deposit_services.release_deposit(
            db, actor_for(landlord), held_deposit.id, Decimal("350.00"), "Broken window"
        )

        assert deposit.status == DepositStatus.PARTIAL_RELEASE
        assert released == Decimal("1650.00")
        assert deducted == Decimal("350.00")
        assert deposit.deduction_reason == "Broken window"

    async def test_deduction_needs_reason(self, db, landlord, held_deposit):
        with pytest.raises(ValidationError):
            await deposit_services.release_deposit(
                db, actor_for(landlord), held_deposit.id, Decimal("100.00"), None
            )

    @pytest.mark.parametrize("deduction", [Decimal("-1.00"), Decimal("2000.01")])
    async def test_deduction_bounds(self, db, landlord, held_deposit, deduction):
        with pytest.raises(ValidationError):
            await deposit_services.release_deposit(
                db, actor_for(landlord), held_deposit.id, deduction, "Damage"
            )

    async def test_pending_deposit_cannot_be_released(self, db, landlord, lease):
        deposit = await deposit_services.create_for_lease(db, actor_for(landlord), lease.id)

        with pytest.raises(BusinessLogicError, match="not currently held"):
            await deposit_services.release_deposit(db, actor_for(landlord), deposit.id)

    async def test_forfeit_keeps_everything(self, db, landlord, held_deposit):
        deposit = await deposit_services.forfeit_deposit(
            db, actor_for(landlord), held_deposit.id, "Abandoned the property"
        )

        assert deposit.status == DepositStatus.FORFEITED
        assert deposit.deduction_amount == deposit.amount

    async def test_forfeit_needs_reason(self, db, landlord, held_deposit):
        with pytest.raises(ValidationError):
            await deposit_services.forfeit_deposit(db, actor_for(landlord), held_deposit.id, " ")

    async def test_released_deposit_is_final(self, db, landlord, held_deposit):
        await deposit_services.release_deposit(db, actor_for(landlord), held_deposit.id)

        with pytest.raises(BusinessLogicError):
            await deposit_services.forfeit_deposit(
                db, actor_for(landlord), held_deposit.id, "Changed my mind"
            )


class TestReleaseRequest:
    async def test_tenant_can_ask(self, db, tenant, held_deposit):
        deposit = await deposit_services.request_release(
            db, actor_for(tenant), held_deposit.id, "Lease ended, keys returned"
        )

        assert deposit.release_requested_by == tenant.id
        assert deposit.release_requested_at is not None
        assert deposit.status == DepositStatus.HELD

    async def test_strangers_cannot_ask(self, db, make_user, held_deposit):
        stranger = await make_user("stranger@rentlink.co.za")

        with pytest.raises(NotFoundError):
            await deposit_services.request_release(
                db, actor_for(stranger), held_deposit.id, "Please"
            )


class TestDepositRoutes:
    async def test_release_route_reports_amounts(self, client, landlord, held_deposit):
        response = await client.post(
            f"/api/deposits/{held_deposit.id}/release",
            json={"deduction_amount": "500.00", "deduction_reason": "Cleaning"},
            headers=auth_headers(landlord),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["deposit"]["status"] == "partial_release"
        assert Decimal(data["released_amount"]) == Decimal("1500")
        assert Decimal(data["deducted_amount"]) == Decimal("500")

    async def test_over_deduction_is_rejected(self, client, landlord, held_deposit):
        response = await client.post(
            f"/api/deposits/{held_deposit.id}/release",
            json={"deduction_amount": "5000.00", "deduction_reason": "Everything"},
            headers=auth_headers(landlord),
        )

        assert response.status_code == 422
        assert response.json()["success"] is False
