"""S3 listing helpers."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any


def iter_list_objects_v2(client: Any, *, bucket: str, **kwargs: Any) -> Iterator[dict[str, Any]]:
    """Iterate over `list_objects_v2` result pages (ContinuationToken loop)."""

    token: str | None = None
    while True:
        call_kwargs: dict[str, Any] = {"Bucket": bucket, **kwargs}
        if token:
            call_kwargs["ContinuationToken"] = token

        resp: dict[str, Any] = dict(client.list_objects_v2(**call_kwargs))
        yield resp

        if not resp.get("IsTruncated"):
            break
        token = str(resp.get("NextContinuationToken") or "")
        if not token:
            break


def iter_object_keys(client: Any, *, bucket: str, prefix: str) -> Iterator[list[str]]:
    """Yield the object keys under `prefix`, one list per listing page."""
    for resp in iter_list_objects_v2(client, bucket=bucket, Prefix=prefix):
        keys = [str(obj["Key"]) for obj in resp.get("Contents") or [] if obj.get("Key")]
        if keys:
            yield keys
