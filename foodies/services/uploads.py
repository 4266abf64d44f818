"""Organization branding images (logo / header) stored in the public bucket."""

import logging
import re
import time

from foodies.domain.enums import ImageKind
from foodies.services.storage import StorageClient

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def image_object_path(organization: str | None, kind: ImageKind, filename: str | None) -> tuple[str, str]:
    """Return ``(object_path, file_name)`` for a new upload.

    Names are ``{org}_{kind}_{epoch_ms}.{ext}`` under ``organization-images/``.
    """
    _, dot, ext = (filename or "").rpartition(".")
    ext = ext.lower() if dot and ext else "png"
    org = _UNSAFE.sub("-", organization or "global").strip("-") or "global"
    file_name = f"{org}_{kind.value}_{int(time.time() * 1000)}.{_UNSAFE.sub('', ext)}"
    return f"organization-images/{file_name}", file_name


class ImageUploadService:
    def __init__(self, storage: StorageClient):
        self._storage = storage

    async def upload(
        self,
        organization: str | None,
        kind: ImageKind,
        filename: str | None,
        content: bytes,
        content_type: str,
    ) -> tuple[str, str]:
        """Store the image; returns ``(public_url, file_name)``."""
        path, file_name = image_object_path(organization, kind, filename)
        url = await self._storage.upload(path, content, content_type=content_type)
        logger.info("Stored %s image for %s at %s", kind.value, organization, path)
        return url, file_name
