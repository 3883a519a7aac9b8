"""Accounts, tokens and session handling."""

from datetime import timedelta

import pytest

from rentlink_backend.core.exceptions import AuthenticationError, DuplicateResourceError
from rentlink_backend.modules.auth import services as auth_services
from rentlink_backend.modules.auth.jwt_service import (
    create_access_token,
    decode_access_token,
    hash_refresh_token,
)
from rentlink_backend.modules.auth.models import UserRole
from rentlink_backend.modules.auth.password_service import hash_password, verify_password
from rentlink_backend.modules.auth.schemas import UserRegister

from .helpers import PASSWORD, auth_headers


class TestPasswordsAndTokens:
    def test_password_hash_round_trip(self):
        hashed = hash_password("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_access_token_claims(self):
        token = create_access_token(7, "a@rentlink.co.za", "landlord", first_name="Ann")
        payload = decode_access_token(token)

        assert payload["sub"] == "7"
        assert payload["role"] == "landlord"
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self):
        token = create_access_token(
            7, "a@rentlink.co.za", "tenant", expires_delta=timedelta(seconds=-1)
        )

        assert decode_access_token(token) is None

    def test_refresh_token_hash_is_stable(self):
        assert hash_refresh_token("abc") == hash_refresh_token("abc")
        assert hash_refresh_token("abc") != hash_refresh_token("abd")


class TestRegistration:
    async def test_new_accounts_are_tenants(self, db):
        user, tokens = await auth_services.register_user(
            db,
            UserRegister(email="new@rentlink.co.za", first_name="Nia", password=PASSWORD),
        )

        assert user.role == UserRole.TENANT
        assert user.is_verified is False
        assert decode_access_token(tokens.access_token)["role"] == "tenant"

    async def test_duplicate_email(self, db, tenant):
        with pytest.raises(DuplicateResourceError):
            await auth_services.register_user(
                db,
                UserRegister(email=tenant.email, first_name="Again", password=PASSWORD),
            )


class TestLogin:
    async def test_wrong_password_counts_down(self, db, tenant):
        with pytest.raises(AuthenticationError, match="4 attempts remaining"):
            await auth_services.authenticate_user(db, tenant.email, "not-the-password")

    async def test_unknown_email(self, db):
        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await auth_services.authenticate_user(db, "nobody@rentlink.co.za", PASSWORD)

    async def test_account_locks_after_repeated_failures(self, db, tenant):
        for _ in range(4):
            with pytest.raises(AuthenticationError):
                await auth_services.authenticate_user(db, tenant.email, "bad-password")

        with pytest.raises(AuthenticationError, match="Account locked"):
            await auth_services.authenticate_user(db, tenant.email, "bad-password")

        with pytest.raises(AuthenticationError, match="Account is locked"):
            await auth_services.authenticate_user(db, tenant.email, PASSWORD)

    async def test_success_resets_failures(self, db, tenant):
        with pytest.raises(AuthenticationError):
            await auth_services.authenticate_user(db, tenant.email, "bad-password")

        user, tokens = await auth_services.authenticate_user(db, tenant.email, PASSWORD)

        assert user.failed_login_attempts == 0
        assert user.last_login is not None
        assert tokens.token_type == "bearer"


class TestRefresh:
    async def test_refresh_rotates_token(self, db, tenant):
        _, tokens = await auth_services.authenticate_user(db, tenant.email, PASSWORD)

        rotated = await auth_services.refresh_access_token(db, tokens.refresh_token)

        assert rotated.refresh_token != tokens.refresh_token
        with pytest.raises(AuthenticationError, match="revoked"):
            await auth_services.refresh_access_token(db, tokens.refresh_token)

    async def test_refresh_picks_up_new_role(self, db, tenant):
        _, tokens = await auth_services.authenticate_user(db, tenant.email, PASSWORD)
        await auth_services.promote_to_landlord(db, tenant.id)
        await db.commit()

        rotated = await auth_services.refresh_access_token(db, tokens.refresh_token)

        assert decode_access_token(rotated.access_token)["role"] == "landlord"

    async def test_unknown_refresh_token(self, db):
        with pytest.raises(AuthenticationError, match="Invalid refresh token"):
            await auth_services.refresh_access_token(db, "made-up")

    async def test_logout_revokes_every_session(self, db, tenant):
        _, first = await auth_services.authenticate_user(db, tenant.email, PASSWORD)
        await auth_services.authenticate_user(db, tenant.email, PASSWORD)

        assert await auth_services.logout_user(db, tenant.id) == 2
        with pytest.raises(AuthenticationError):
            await auth_services.refresh_access_token(db, first.refresh_token)


class TestAuthRoutes:
    async def test_register_then_me(self, client):
        registered = await client.post(
            "/api/auth/register",
            json={
                "email": "route@rentlink.co.za",
                "first_name": "Rita",
                "password": PASSWORD,
            },
        )
        assert registered.status_code == 200
        assert registered.json()["message"] == "Welcome, Rita!"
        token = registered.json()["data"]["access_token"]

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert me.json()["data"]["email"] == "route@rentlink.co.za"
        assert me.json()["data"]["role"] == "tenant"

    async def test_login_failure_envelope(self, client, tenant):
        response = await client.post(
            "/api/auth/login", json={"email": tenant.email, "password": "nope-nope"}
        )

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None

    async def test_update_profile(self, client, tenant):
        response = await client.patch(
            "/api/auth/me", json={"phone": "+27 21 555 0100"}, headers=auth_headers(tenant)
        )

        assert response.status_code == 200
        assert response.json()["data"]["phone"] == "+27 21 555 0100"

    async def test_change_password(self, client, tenant):
        wrong = await client.post(
            "/api/auth/change-password",
            json={"current_password": "not-it", "new_password": "brand-new-pass"},
            headers=auth_headers(tenant),
        )
        assert wrong.status_code == 422

        changed = await client.post(
            "/api/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "brand-new-pass"},
            headers=auth_headers(tenant),
        )
        assert changed.status_code == 200

        login = await client.post(
            "/api/auth/login",
            json={"email": tenant.email, "password": "brand-new-pass"},
        )
        assert login.status_code == 200
