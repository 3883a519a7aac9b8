"""Test doubles and small builders shared by the test modules."""

import io

from fastapi import UploadFile
from starlette.datastructures import Headers

from rentlink_backend.modules.auth.jwt_service import create_access_token
from rentlink_backend.modules.auth.models import User
from rentlink_backend.modules.auth.schemas import AuthenticatedUser

PASSWORD = "correct-horse-battery"


class InMemoryStorage:
    """Object store double that keeps uploads in a dict."""

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        self.objects[key] = (content, content_type)
        return key

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)

    async def signed_url(self, key: str | None, expires_in: int | None = None) -> str | None:
        if not key:
            return None
        return f"https://storage.test/{key}?expires={expires_in or 3600}"


def make_upload(
    filename: str = "id.png",
    content_type: str = "image/png",
    content: bytes = b"\x89PNG data",
) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def actor_for(user: User) -> AuthenticatedUser:
    return AuthenticatedUser.from_user(user)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(
        user.id,
        user.email,
        user.role.value,
        first_name=user.first_name,
        last_name=user.last_name,
        is_verified=user.is_verified,
    )
    return {"Authorization": f"Bearer {token}"}
