"""Services layer."""

from hlsflow.services.publisher import (
    CACHE_POLICIES,
    DEFAULT_DOWNLOAD_HOST,
    CachePolicy,
    UploadedTokenMap,
    build_download_url,
    policy_for,
    publish_directory,
    republish_text,
)

__all__ = [
    "CACHE_POLICIES",
    "DEFAULT_DOWNLOAD_HOST",
    "CachePolicy",
    "UploadedTokenMap",
    "build_download_url",
    "policy_for",
    "publish_directory",
    "republish_text",
]
