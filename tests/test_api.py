"""Application wiring: health check, error envelopes and request tracing."""

import pytest

from rentlink_backend.core.utils import safe_filename
from rentlink_backend.modules.notifications import send_email, templates

from .helpers import auth_headers


class TestEnvelopes:
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_missing_token_is_401(self, client):
        response = await client.get("/api/leases/tenant")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Unauthorized",
            "error": "Unauthorized",
            "data": None,
        }

    async def test_garbage_token_is_401(self, client):
        response = await client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    async def test_request_validation_envelope(self, client, landlord):
        response = await client.post(
            "/api/properties", json={"title": ""}, headers=auth_headers(landlord)
        )

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Request validation failed"
        assert any(error["field"].endswith("title") for error in body["error"])

    async def test_not_found_envelope(self, client):
        response = await client.get("/api/properties/4040")

        assert response.status_code == 404
        assert response.json()["message"] == "Property with ID 4040 not found"

    async def test_transaction_id_is_echoed(self, client):
        response = await client.get(
            "/api/health", headers={"x-transaction-id": "txn-123"}
        )

        assert response.headers["x-transaction-id"] == "txn-123"

    async def test_transaction_id_is_generated(self, client):
        response = await client.get("/api/health")

        assert response.headers["x-transaction-id"]


class TestNotifications:
    async def test_disabled_email_is_not_sent(self):
        assert await send_email("tenant@rentlink.co.za", "Hi", "<p>Hi</p>") is False

    async def test_missing_recipient(self):
        assert await send_email(None, "Hi", "<p>Hi</p>") is False

    def test_templates_escape_user_text(self):
        subject, html = templates.lease_rejected("12 Long Street", "<b>late</b>")

        assert subject == "Lease Application Update: 12 Long Street"
        assert "&lt;b&gt;late&lt;/b&gt;" in html
        assert "<b>late</b>" not in html

    def test_signed_template_names_tenant(self):
        subject, html = templates.tenant_signed(
            "https://rentlink.co.za/leases/1", "Tom User", "12 Long Street"
        )

        assert subject == "Lease Signed: Tom User - 12 Long Street"
        assert "https://rentlink.co.za/leases/1" in html


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("id front.png", "id_front.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\scan.pdf", "scan.pdf"),
        ("", "file"),
        (None, "file"),
        ("...", "file"),
    ],
)
def test_safe_filename(filename, expected):
    assert safe_filename(filename) == expected
