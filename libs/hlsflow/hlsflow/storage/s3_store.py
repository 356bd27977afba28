"""S3/MinIO object store implementation."""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Any

from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hlsflow.exceptions import StorageError
from hlsflow.storage.object_store import (
    DEFAULT_TOKEN_METADATA_KEY,
    ObjectStore,
    directory_prefix,
)
from hlsflow.storage.s3_pagination import iter_object_keys

logger = logging.getLogger(__name__)


class S3ObjectStore(ObjectStore):
    """S3/MinIO bucket; tokens are stored as user metadata (`x-amz-meta-*`)."""

    def __init__(
        self,
        bucket: str,
        *,
        endpoint: str | None = None,
        access_key: str = "",
        secret_key: str = "",
        region: str = "us-east-1",
        token_metadata_key: str = DEFAULT_TOKEN_METADATA_KEY,
    ) -> None:
        self.bucket = bucket
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.token_metadata_key = token_metadata_key
        self._client: Any | None = None

    def _ensure_client(self) -> Any:
        if self._client is not None:
            return self._client

        import boto3

        kwargs: dict[str, Any] = {
            "region_name": self.region,
            "config": Config(s3={"addressing_style": "path"}),
        }
        if self.endpoint:
            kwargs["endpoint_url"] = self.endpoint
        if self.access_key and self.secret_key:
            kwargs["aws_access_key_id"] = self.access_key
            kwargs["aws_secret_access_key"] = self.secret_key
        self._client = boto3.client("s3", **kwargs)
        return self._client

    def _extra_args(
        self,
        *,
        content_type: str | None,
        cache_control: str | None,
        token: str | None,
    ) -> dict[str, Any]:
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type
        if cache_control:
            extra["CacheControl"] = cache_control
        metadata = self.custom_metadata(token)
        if metadata:
            extra["Metadata"] = metadata
        return extra

    async def download(self, object_path: str, local_path: str | Path) -> Path:
        client = self._ensure_client()
        dst = Path(local_path)
        try:
            await asyncio.to_thread(client.download_file, self.bucket, object_path, str(dst))
        except (ClientError, BotoCoreError) as exc:
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
        client = self._ensure_client()
        extra = self._extra_args(content_type=content_type, cache_control=cache_control, token=token)
        try:
            await asyncio.to_thread(
                client.upload_file, str(local_path), self.bucket, object_path, ExtraArgs=extra
            )
        except (ClientError, BotoCoreError) as exc:
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
        client = self._ensure_client()
        extra = self._extra_args(content_type=content_type, cache_control=cache_control, token=token)
        try:
            await asyncio.to_thread(
                client.upload_fileobj, io.BytesIO(bytes(data)), self.bucket, object_path, ExtraArgs=extra
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError("upload", object_path, str(exc)) from exc

    async def delete_prefix(self, prefix: str) -> int:
        client = self._ensure_client()
        prefix = directory_prefix(prefix)

        def _delete_all() -> int:
            deleted = 0
            for keys in iter_object_keys(client, bucket=self.bucket, prefix=prefix):
                client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in keys]},
                )
                deleted += len(keys)
            return deleted

        try:
            deleted = int(await asyncio.to_thread(_delete_all))
        except (ClientError, BotoCoreError) as exc:
            raise StorageError("delete_prefix", prefix, str(exc)) from exc
        logger.info("s3 objects deleted (prefix=%s, objects=%d)", prefix, deleted)
        return deleted
