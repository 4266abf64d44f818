"""Branding image uploads (school logo and header)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from foodies.core.config import settings
from foodies.core.exceptions import BadRequestError, PayloadTooLargeError
from foodies.domain.enums import ImageKind
from foodies.domain.profile import Profile
from foodies.routers.deps import get_storage, require_staff
from foodies.schemas.upload import UploadResult
from foodies.services.storage import StorageClient
from foodies.services.uploads import ImageUploadService

router = APIRouter(tags=["Uploads"])


@router.post("/upload-image", response_model=UploadResult)
async def upload_image(
    file: Optional[UploadFile] = File(default=None),
    kind: Optional[str] = Form(default=None, alias="type"),
    caller: Profile = Depends(require_staff),
    storage: StorageClient = Depends(get_storage),
):
    """Store a logo or header image and return its public URL."""
    if file is None:
        raise BadRequestError("No file provided")
    try:
        image_kind = ImageKind(kind or "")
    except ValueError:
        raise BadRequestError("Invalid file type. Must be 'logo' or 'header'") from None

    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise BadRequestError("File must be an image")

    # One byte past the limit is enough to detect an oversized file
    content = await file.read(settings.max_image_upload_bytes + 1)
    if not content:
        raise BadRequestError("File is empty")
    if len(content) > settings.max_image_upload_bytes:
        raise PayloadTooLargeError(f"File size must be less than {settings.max_image_upload_mb}MB")

    url, file_name = await ImageUploadService(storage).upload(
        caller.organization, image_kind, file.filename, content, content_type
    )
    return UploadResult(url=url, file_name=file_name)
