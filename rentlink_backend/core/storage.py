"""
Private object storage for identity documents, lease documents and property
images.

Files are referenced in the database by their object key only. Readers get a
time-limited presigned URL, never a public link.
"""

from functools import lru_cache
from typing import Annotated

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from ..config import settings
from .exceptions import ExternalServiceError
from .logging import get_logger

logger = get_logger(__name__)

VERIFICATION_PREFIX = "landlord-verification"
LEASE_DOCUMENTS_PREFIX = "lease-documents"
PROPERTY_IMAGES_PREFIX = "property-images"


class StorageService:
    """S3-compatible storage client with presigned URL support."""

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: str | None = None,
        region_name: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        default_expiry: int = 3600,
    ):
        self.bucket_name = bucket_name
        self.default_expiry = default_expiry
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
            endpoint_url=endpoint_url,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        """Store an object and return its key.

        Raises:
            ExternalServiceError: If the storage backend rejects the upload
        """
        try:
            await run_in_threadpool(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                "Failed to upload object", extra={"key": key, "error": str(e)}
            )
            raise ExternalServiceError("storage", "upload") from e

        logger.info("Stored object", extra={"key": key, "size": len(content)})
        return key

    async def delete(self, key: str) -> None:
        try:
            await run_in_threadpool(
                self.s3_client.delete_object, Bucket=self.bucket_name, Key=key
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                "Failed to delete object", extra={"key": key, "error": str(e)}
            )
            raise ExternalServiceError("storage", "delete") from e

    async def signed_url(self, key: str | None, expires_in: int | None = None) -> str | None:
        """Presigned GET URL for a key, or None when it cannot be issued.

        Keys that are already absolute URLs are returned unchanged.
        """
        if not key:
            return None
        if key.startswith(("http://", "https://")):
            return key

        try:
            return await run_in_threadpool(
                self.s3_client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expires_in or self.default_expiry,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                "Failed to sign object URL", extra={"key": key, "error": str(e)}
            )
            return None


@lru_cache
def get_storage() -> StorageService:
    """Shared storage client built from settings."""
    return StorageService(
        bucket_name=settings.storage_bucket,
        endpoint_url=settings.storage_endpoint_url,
        region_name=settings.storage_region,
        access_key_id=settings.storage_access_key_id,
        secret_access_key=settings.storage_secret_access_key,
        default_expiry=settings.signed_url_expiry_seconds,
    )


Storage = Annotated[StorageService, Depends(get_storage)]
