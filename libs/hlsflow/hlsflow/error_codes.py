"""Canonical error codes recorded for failed transcode jobs."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    INVALID_CONFIG = "INVALID_CONFIG"

    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"
    POSTER_FAILED = "POSTER_FAILED"
    ENCODE_FAILED = "ENCODE_FAILED"
    PLAYLIST_FAILED = "PLAYLIST_FAILED"
    PUBLISH_FAILED = "PUBLISH_FAILED"
    TOKEN_MISSING = "TOKEN_MISSING"
    RECONCILE_FAILED = "RECONCILE_FAILED"
