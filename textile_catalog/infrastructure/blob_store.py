"""Blob storage for product and variant images.

Objects are addressed by hierarchical path; reads go through a fetchable
download URL.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import quote

import httpx
import structlog

logger = structlog.get_logger()


class BlobStore(ABC):
    """Async blob store interface."""

    @abstractmethod
    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store bytes under a path.

        Args:
            path: Destination path.
            data: Object contents.
            content_type: MIME type.

        Returns:
            The stored path.
        """

    @abstractmethod
    async def get_download_url(self, path: str) -> str:
        """Resolve a fetchable URL for a stored path."""

    async def close(self) -> None:
        """Release backend resources."""
        return None


@dataclass
class StoredBlob:
    """Object held by the in-memory store."""

    data: bytes
    content_type: str


class InMemoryBlobStore(BlobStore):
    """Dict-backed blob store; URLs use the ``memory://`` scheme."""

    def __init__(self, base_url: str = "memory://") -> None:
        self.base_url = base_url
        self.blobs: dict[str, StoredBlob] = {}

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.blobs[path] = StoredBlob(data=data, content_type=content_type)
        return path

    async def get_download_url(self, path: str) -> str:
        if path not in self.blobs:
            raise KeyError(f"No object at {path}")
        return f"{self.base_url}{path}"


class FirebaseStorageBlobStore(BlobStore):
    """Blob store backed by the Firebase Storage REST API.

    Uploads with ``POST /v0/b/{bucket}/o?name=<path>`` and builds download
    URLs from the object's ``downloadTokens`` metadata.
    """

    def __init__(
        self,
        bucket: str,
        base_url: str = "https://firebasestorage.googleapis.com",
        auth_token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the storage client.

        Args:
            bucket: Storage bucket name.
            base_url: Storage API base URL.
            auth_token: Optional bearer token sent with every request.
            timeout: Request timeout in seconds.
        """
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.auth_token:
                headers["Authorization"] = f"Bearer {self.auth_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _object_path(self, path: str) -> str:
        return f"/v0/b/{self.bucket}/o/{quote(path, safe='')}"

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        client = await self._get_client()
        response = await client.post(
            f"/v0/b/{self.bucket}/o",
            params={"name": path, "uploadType": "media"},
            content=data,
            headers={"Content-Type": content_type},
        )
        response.raise_for_status()
        logger.info("Blob uploaded", path=path, size=len(data))
        return path

    async def get_download_url(self, path: str) -> str:
        client = await self._get_client()
        response = await client.get(self._object_path(path))
        response.raise_for_status()

        metadata = response.json()
        url = f"{self.base_url}{self._object_path(path)}?alt=media"
        tokens = (metadata.get("downloadTokens") or "").split(",")
        if tokens[0]:
            url = f"{url}&token={tokens[0]}"
        return url
