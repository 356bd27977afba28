"""Storage finalize notifications consumed by the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from collections.abc import Mapping
from urllib.parse import unquote_plus

_S3_META_PREFIX = "x-amz-meta-"


def _str_map(value: object) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}


@dataclass(frozen=True)
class StorageFinalizeEvent:
    """One object-finalized notification (object path, content-type, custom metadata)."""

    bucket: str
    name: str
    content_type: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    generation: str | None = None

    @classmethod
    def from_gcs_object(cls, payload: Mapping[str, Any]) -> "StorageFinalizeEvent":
        """Build from a GCS object resource (CloudEvent `data` / Pub/Sub notification body)."""
        name = str(payload.get("name") or "")
        if not name:
            raise ValueError("storage event is missing the object name")
        generation = payload.get("generation")
        return cls(
            bucket=str(payload.get("bucket") or ""),
            name=name,
            content_type=str(payload.get("contentType") or ""),
            metadata=_str_map(payload.get("metadata")),
            generation=str(generation) if generation is not None else None,
        )

    @classmethod
    def from_s3_record(cls, record: Mapping[str, Any]) -> "StorageFinalizeEvent":
        """Build from one `Records[]` entry of an S3/MinIO bucket notification."""
        s3 = record.get("s3")
        if not isinstance(s3, Mapping):
            raise ValueError("bucket notification record has no `s3` section")
        bucket = s3.get("bucket") if isinstance(s3.get("bucket"), Mapping) else {}
        obj = s3.get("object") if isinstance(s3.get("object"), Mapping) else {}
        key = unquote_plus(str(obj.get("key") or ""))
        if not key:
            raise ValueError("bucket notification record is missing the object key")

        metadata: dict[str, str] = {}
        for k, v in _str_map(obj.get("userMetadata")).items():
            lowered = k.lower()
            if lowered.startswith(_S3_META_PREFIX):
                metadata[lowered[len(_S3_META_PREFIX):]] = v
            elif lowered != "content-type":
                metadata[lowered] = v

        version = obj.get("versionId") or obj.get("sequencer")
        return cls(
            bucket=str(bucket.get("name") or ""),
            name=key,
            content_type=str(obj.get("contentType") or ""),
            metadata=metadata,
            generation=str(version) if version else None,
        )


def iter_s3_records(payload: object) -> list[Mapping[str, Any]]:
    """Flatten an S3 notification body (plain or MinIO access-format) into its records."""
    if isinstance(payload, list):
        out: list[Mapping[str, Any]] = []
        for entry in payload:
            if isinstance(entry, Mapping):
                out.extend(iter_s3_records(entry.get("Event") or entry))
        return out
    if isinstance(payload, Mapping):
        records = payload.get("Records")
        if isinstance(records, list):
            return [r for r in records if isinstance(r, Mapping)]
        if isinstance(payload.get("s3"), Mapping):
            return [payload]
    return []
