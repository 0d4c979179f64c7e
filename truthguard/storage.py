"""
Thin adapter over Supabase Storage's REST API.

Only two calls are needed: upload an object under a key, and compute the
public URL of that key. Bucket policy (public read, retention) is owned
by the storage project, not by this package.
"""

import time
from typing import Optional

import httpx
from loguru import logger

from .errors import StorageError


def make_object_key(filename: str, now_ms: Optional[int] = None) -> str:
    """`<epoch-ms>.<extension of filename>`; a name without a dot is used whole as the extension."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ext = filename.rsplit(".", 1)[-1]
    return f"{now_ms}.{ext}"


class ObjectStorage:
    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: Optional[str], bucket: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def _headers(self, content_type: str) -> dict:
        headers = {"Content-Type": content_type}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        return headers

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        url = f"{self._base_url}/storage/v1/object/{self._bucket}/{key}"
        try:
            r = await self._client.post(url, content=data, headers=self._headers(content_type))
        except httpx.HTTPError as e:
            raise StorageError(f"Upload failed: {e}") from e
        if not r.is_success:
            logger.error("Storage upload of {} failed: {} {}", key, r.status_code, r.text)
            raise StorageError(f"Upload failed: {r.status_code} {r.text}".strip())
        logger.info("Uploaded {} ({} bytes) to bucket {}", key, len(data), self._bucket)

    def public_url(self, key: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{key}"
