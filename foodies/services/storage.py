"""Object storage client (public bucket uploads over the storage REST API)."""

from __future__ import annotations

import logging

import httpx

from foodies.core.config import settings
from foodies.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageClient:
    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        *,
        bucket: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.identity_url).rstrip("/")
        self._bucket = bucket or settings.storage_bucket
        key = service_key if service_key is not None else settings.identity_service_key
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/storage/v1",
            headers={"apikey": key or "", "Authorization": f"Bearer {key or ''}"},
            timeout=settings.identity_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def upload(self, path: str, content: bytes, *, content_type: str) -> str:
        """Store ``content`` at ``path`` (no overwrite) and return its public URL."""
        try:
            response = await self._client.post(
                f"/object/{self._bucket}/{path}",
                content=content,
                headers={"Content-Type": content_type, "x-upsert": "false"},
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Upload failed: {exc}") from exc
        if not response.is_success:
            logger.error("Upload of %s failed: %s %s", path, response.status_code, response.text)
            raise StorageError(f"Upload failed: {response.status_code}")
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{path}"
