"""Object store interface and local implementation."""

from __future__ import annotations

import asyncio
import json
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from hlsflow.exceptions import StorageError

DEFAULT_TOKEN_METADATA_KEY = "firebaseStorageDownloadTokens"


class ObjectStore(ABC):
    """Bucket-scoped object storage used by the transcode pipeline."""

    bucket: str
    token_metadata_key: str = DEFAULT_TOKEN_METADATA_KEY

    @abstractmethod
    async def download(self, object_path: str, local_path: str | Path) -> Path:
        """Download an object to `local_path`."""

    @abstractmethod
    async def upload_file(
        self,
        local_path: str | Path,
        object_path: str,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        token: str | None = None,
    ) -> None:
        """Upload a local file, attaching `token` as custom metadata."""

    @abstractmethod
    async def upload_bytes(
        self,
        data: bytes,
        object_path: str,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        token: str | None = None,
    ) -> None:
        """Upload in-memory bytes, attaching `token` as custom metadata."""

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object under `prefix/`; returns the number deleted."""

    def custom_metadata(self, token: str | None) -> dict[str, str]:
        if not token:
            return {}
        return {self.token_metadata_key: token}


def directory_prefix(prefix: str) -> str:
    prefix = str(prefix or "").strip().strip("/")
    if not prefix:
        raise StorageError("delete_prefix", prefix, "refusing to operate on the bucket root")
    return prefix + "/"


class LocalObjectStore(ObjectStore):
    """Filesystem object store for development and tests.

    Objects live under `<base_dir>/<bucket>/<path>`; their metadata is kept in
    JSON sidecars under `<base_dir>/.meta/<bucket>/<path>.json`.
    """

    def __init__(
        self,
        base_dir: str,
        bucket: str,
        *,
        token_metadata_key: str = DEFAULT_TOKEN_METADATA_KEY,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.bucket = bucket
        self.token_metadata_key = token_metadata_key

    def _path(self, object_path: str) -> Path:
        return self.base_dir / self.bucket / object_path.lstrip("/")

    def _meta_path(self, object_path: str) -> Path:
        return self.base_dir / ".meta" / self.bucket / f"{object_path.lstrip('/')}.json"

    def _write_meta(
        self,
        object_path: str,
        *,
        content_type: str | None,
        cache_control: str | None,
        token: str | None,
    ) -> None:
        meta_path = self._meta_path(object_path)
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        meta = {
            "contentType": content_type,
            "cacheControl": cache_control,
            "metadata": self.custom_metadata(token),
        }
        meta_path.write_text(json.dumps(meta, ensure_ascii=False, indent=2), encoding="utf-8")

    def read_metadata(self, object_path: str) -> dict[str, Any]:
        meta_path = self._meta_path(object_path)
        if not meta_path.exists():
            return {}
        return dict(json.loads(meta_path.read_text(encoding="utf-8")))

    def list_objects(self, prefix: str = "") -> list[str]:
        root = self.base_dir / self.bucket
        if not root.exists():
            return []
        out = [p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()]
        return sorted(p for p in out if p.startswith(prefix))

    async def download(self, object_path: str, local_path: str | Path) -> Path:
        src = self._path(object_path)
        dst = Path(local_path)
        if not src.is_file():
            raise StorageError("download", object_path, "object not found")
        dst.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(shutil.copyfile, src, dst)
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
        dst = self._path(object_path)
        dst.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(shutil.copyfile, Path(local_path), dst)
        self._write_meta(
            object_path, content_type=content_type, cache_control=cache_control, token=token
        )

    async def upload_bytes(
        self,
        data: bytes,
        object_path: str,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
        token: str | None = None,
    ) -> None:
        dst = self._path(object_path)
        dst.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(dst.write_bytes, bytes(data))
        self._write_meta(
            object_path, content_type=content_type, cache_control=cache_control, token=token
        )

    async def delete_prefix(self, prefix: str) -> int:
        prefix = directory_prefix(prefix)
        keys = self.list_objects(prefix)
        for key in keys:
            self._path(key).unlink(missing_ok=True)
            self._meta_path(key).unlink(missing_ok=True)
        for root in (self._path(prefix), self.base_dir / ".meta" / self.bucket / prefix):
            if root.is_dir():
                shutil.rmtree(root, ignore_errors=True)
        return len(keys)
