"""Playlist formatters."""

from hlsflow.formatters.hls import (
    MASTER_PLAYLIST_NAME,
    build_master_absolute,
    build_master_relative,
    estimate_bandwidth,
    rewrite_variant_playlist,
)

__all__ = [
    "MASTER_PLAYLIST_NAME",
    "build_master_absolute",
    "build_master_relative",
    "estimate_bandwidth",
    "rewrite_variant_playlist",
]
