"""Publish a local HLS package to object storage with per-object access tokens."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from collections.abc import Mapping
from urllib.parse import quote

from hlsflow.exceptions import TokenNotFoundError
from hlsflow.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_HOST = "firebasestorage.googleapis.com"

# Same set of characters `encodeURIComponent` leaves unescaped.
_URI_COMPONENT_SAFE = "!~*'()"

UploadedTokenMap = dict[str, str]


@dataclass(frozen=True)
class CachePolicy:
    content_type: str
    cache_control: str


CACHE_POLICIES: dict[str, CachePolicy] = {
    ".m3u8": CachePolicy("application/vnd.apple.mpegurl", "public,max-age=60,must-revalidate"),
    ".ts": CachePolicy("video/mp2t", "public,max-age=2592000,immutable"),
    ".jpg": CachePolicy("image/jpeg", "public,max-age=604800,immutable"),
}


def policy_for(name: str) -> CachePolicy | None:
    return CACHE_POLICIES.get(Path(name).suffix.lower())


def new_token() -> str:
    return str(uuid.uuid4())


def join_object_path(prefix: str, name: str) -> str:
    return f"{prefix.rstrip('/')}/{name}"


def build_download_url(
    bucket: str,
    object_path: str,
    token_map: Mapping[str, str],
    *,
    host: str = DEFAULT_DOWNLOAD_HOST,
) -> str:
    """Compose the tokenized download URL of an already-published object."""
    token = token_map.get(object_path)
    if not token:
        raise TokenNotFoundError(object_path)
    encoded = quote(object_path, safe=_URI_COMPONENT_SAFE)
    return f"https://{host}/v0/b/{bucket}/o/{encoded}?alt=media&token={token}"


async def publish_directory(
    store: ObjectStore,
    local_dir: str | Path,
    destination_prefix: str,
) -> UploadedTokenMap:
    """Upload every regular file of `local_dir` (non-recursive) under `destination_prefix`.

    Each object gets a fresh random token in its custom metadata; the returned
    map has exactly one entry per uploaded object.
    """
    token_map: UploadedTokenMap = {}
    for path in sorted(Path(local_dir).iterdir()):
        if not path.is_file():
            continue
        dest = join_object_path(destination_prefix, path.name)
        token = new_token()
        policy = policy_for(path.name)
        await store.upload_file(
            path,
            dest,
            content_type=policy.content_type if policy else None,
            cache_control=policy.cache_control if policy else None,
            token=token,
        )
        token_map[dest] = token
        logger.debug("uploaded %s", dest)
    logger.info("published %d objects under %s", len(token_map), destination_prefix)
    return token_map


async def republish_text(
    store: ObjectStore,
    object_path: str,
    text: str,
    token_map: Mapping[str, str],
) -> None:
    """Overwrite a published text object, keeping the token it was published with."""
    token = token_map.get(object_path)
    if not token:
        raise TokenNotFoundError(object_path)
    policy = policy_for(object_path)
    await store.upload_bytes(
        text.encode("utf-8"),
        object_path,
        content_type=policy.content_type if policy else None,
        cache_control=policy.cache_control if policy else None,
        token=token,
    )
    logger.debug("rewrote %s", object_path)
