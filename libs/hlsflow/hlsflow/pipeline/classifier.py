"""Path-based classification of uploaded video objects.

Pure and total: every input maps to a `ClassificationResult`, nothing raises.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import PurePosixPath

from hlsflow.models.classification import HLS_DIRNAME, Category, ClassificationResult

ACCEPTED_EXTENSIONS = frozenset({".mp4", ".mov"})

# Uploaders opt in explicitly with customMetadata `transcode=hls`.
OPT_IN_METADATA_KEY = "transcode"
OPT_IN_METADATA_VALUE = "hls"

_PATTERNS: tuple[tuple[Category, re.Pattern[str]], ...] = (
    (
        Category.BACKGROUND,
        re.compile(r"^videos/public/(?P<site>[^/]+)/homeBackground\.(?:mp4|mov)$", re.IGNORECASE),
    ),
    (
        Category.PRODUCT,
        re.compile(r"^products/public/(?P<site>[^/]+)/(?P<id>[^/.]+)\.(?:mp4|mov)$", re.IGNORECASE),
    ),
    (
        Category.SECTION,
        re.compile(
            r"^videos/public/(?P<site>[^/]+)/sections/(?P<id>[^/.]+)\.(?:mp4|mov)$",
            re.IGNORECASE,
        ),
    ),
    (
        Category.ABOUT_PAGE,
        re.compile(r"^sitePages/(?P<site>[^/]+)/about/[^/]+\.(?:mp4|mov)$", re.IGNORECASE),
    ),
)


def has_reserved_segment(path: str) -> bool:
    """True when any directory segment of `path` is the pipeline's output directory."""
    return HLS_DIRNAME in str(path or "").split("/")[:-1]


def filter_reason(path: str, content_type: str) -> str | None:
    """Why the object is out of scope before any path matching, or None."""
    path = str(path or "")
    content_type = str(content_type or "").strip().lower()
    if has_reserved_segment(path):
        return f"under reserved {HLS_DIRNAME!r} output directory"
    if not content_type.startswith("video/"):
        return f"content-type {content_type!r} is not video"
    ext = PurePosixPath(path).suffix.lower()
    if ext not in ACCEPTED_EXTENSIONS:
        return f"extension {ext!r} is not accepted"
    return None


def match_path(path: str, metadata: Mapping[str, str] | None = None) -> ClassificationResult:
    """Map an already-filtered path to its business category."""
    for category, pattern in _PATTERNS:
        m = pattern.match(path)
        if m is None:
            continue
        groups = m.groupdict()
        return ClassificationResult(
            category=category,
            site_key=groups["site"],
            entity_id=groups.get("id"),
            reason="path pattern",
        )

    flag = (metadata or {}).get(OPT_IN_METADATA_KEY)
    if flag == OPT_IN_METADATA_VALUE:
        return ClassificationResult(category=Category.UNRECOGNIZED, reason="metadata opt-in")

    return ClassificationResult.ignore("no path pattern matched and no opt-in flag")


def classify(
    path: str,
    content_type: str,
    metadata: Mapping[str, str] | None = None,
) -> ClassificationResult:
    reason = filter_reason(path, content_type)
    if reason is not None:
        return ClassificationResult.ignore(reason)
    return match_path(str(path or ""), metadata)
