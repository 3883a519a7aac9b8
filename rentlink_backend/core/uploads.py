"""Validation of uploaded files before they reach object storage."""

from dataclasses import dataclass

from fastapi import UploadFile

from .exceptions import ValidationError
from .utils import safe_filename

MB = 1024 * 1024

IMAGE_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "image/heic", "image/heif"}
)
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}


@dataclass
class ValidatedUpload:
    """An upload that passed type and size checks, read into memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


async def validate_upload(
    file: UploadFile | None,
    allowed_types: frozenset[str] | set[str],
    max_size_mb: int,
    field: str = "file",
) -> ValidatedUpload:
    """Read an upload and check it against allowed MIME types and size.

    Args:
        file: The uploaded file, or None when the field was omitted
        allowed_types: Accepted MIME types
        max_size_mb: Size ceiling in megabytes
        field: Form field name used in error messages

    Returns:
        ValidatedUpload with the file content

    Raises:
        ValidationError: If the file is missing, empty, too large or of a
            disallowed type
    """
    if file is None or not file.filename:
        raise ValidationError("File is required", field=field)

    content_type = (file.content_type or "").lower()
    if content_type not in allowed_types:
        raise ValidationError(
            f"File type '{content_type or 'unknown'}' is not allowed. "
            f"Allowed types: {', '.join(sorted(allowed_types))}",
            field=field,
        )

    content = await file.read()
    if not content:
        raise ValidationError("File is empty", field=field)
    if len(content) > max_size_mb * MB:
        raise ValidationError(
            f"File size exceeds maximum allowed size of {max_size_mb}MB", field=field
        )

    return ValidatedUpload(
        filename=safe_filename(file.filename),
        content_type=content_type,
        content=content,
    )
