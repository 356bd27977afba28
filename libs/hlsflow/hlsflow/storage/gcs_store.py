"""Google Cloud Storage object store."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from hlsflow.exceptions import StorageError
from hlsflow.storage.object_store import (
    DEFAULT_TOKEN_METADATA_KEY,
    ObjectStore,
    directory_prefix,
)

logger = logging.getLogger(__name__)


class GCSObjectStore(ObjectStore):
    """GCS/Firebase Storage bucket."""

    def __init__(
        self,
        bucket: str,
        *,
        token_metadata_key: str = DEFAULT_TOKEN_METADATA_KEY,
        client: storage.Client | None = None,
    ) -> None:
        self.bucket = bucket
        self.token_metadata_key = token_metadata_key
        self._client: storage.Client | None = client

    def _ensure_client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    def _blob(self, object_path: str) -> Any:
        return self._ensure_client().bucket(self.bucket).blob(object_path)

    def _prepare_blob(
        self,
        object_path: str,
        *,
        cache_control: str | None,
        token: str | None,
    ) -> Any:
        blob = self._blob(object_path)
        metadata = self.custom_metadata(token)
        if metadata:
            blob.metadata = metadata
        if cache_control:
            blob.cache_control = cache_control
        return blob

    async def download(self, object_path: str, local_path: str | Path) -> Path:
        dst = Path(local_path)
        blob = self._blob(object_path)
        try:
            await asyncio.to_thread(blob.download_to_filename, str(dst))
        except GoogleAPIError as exc:
            raise StorageError("download", object_path, str(exc)) from exc
        return dst

    async def upload_file(
        self,
        local_path: str | Path,
        object_path: str,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        token: str | None = None,
    ) -> None:
        blob = self._prepare_blob(object_path, cache_control=cache_control, token=token)
        try:
            await asyncio.to_thread(
                blob.upload_from_filename, str(local_path), content_type=content_type
            )
        except GoogleAPIError as exc:
            raise StorageError("upload", object_path, str(exc)) from exc

    async def upload_bytes(
        self,
        data: bytes,
        object_path: str,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        token: str | None = None,
    ) -> None:
        blob = self._prepare_blob(object_path, cache_control=cache_control, token=token)
        try:
            await asyncio.to_thread(blob.upload_from_string, bytes(data), content_type=content_type)
        except GoogleAPIError as exc:
            raise StorageError("upload", object_path, str(exc)) from exc

    async def delete_prefix(self, prefix: str) -> int:
        prefix = directory_prefix(prefix)
        client = self._ensure_client()

        def _delete_all() -> int:
            blobs = list(client.list_blobs(self.bucket, prefix=prefix))
            if blobs:
                client.bucket(self.bucket).delete_blobs(blobs)
            return len(blobs)

        try:
            deleted = int(await asyncio.to_thread(_delete_all))
        except GoogleAPIError as exc:
            raise StorageError("delete_prefix", prefix, str(exc)) from exc
        logger.info("gcs objects deleted (prefix=%s, objects=%d)", prefix, deleted)
        return deleted
