"""HTTP Live Streaming playlist rendering and rewriting."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from hlsflow.models.rendition import Rendition
from hlsflow.services.publisher import DEFAULT_DOWNLOAD_HOST, build_download_url, join_object_path

PLAYLIST_HEADER = "#EXTM3U"
COMMENT_MARKER = "#"
SEGMENT_EXTENSION = ".ts"
MASTER_PLAYLIST_NAME = "master.m3u8"

_LINE_BREAK = re.compile(r"\r?\n")


def estimate_bandwidth(rendition: Rendition) -> int:
    return rendition.bandwidth


def _stream_inf(rendition: Rendition) -> str:
    return (
        f"#EXT-X-STREAM-INF:BANDWIDTH={estimate_bandwidth(rendition)},"
        f"RESOLUTION={rendition.resolution}"
    )


def _render_master(renditions: Sequence[Rendition], uris: Sequence[str]) -> str:
    lines = [PLAYLIST_HEADER]
    for rendition, uri in zip(renditions, uris, strict=True):
        lines.append(_stream_inf(rendition))
        lines.append(uri)
    return "\n".join(lines) + "\n"


def build_master_relative(renditions: Sequence[Rendition]) -> str:
    """Master playlist referencing each variant playlist by its local file name."""
    return _render_master(renditions, [r.playlist_name for r in renditions])


def build_master_absolute(
    bucket: str,
    destination_prefix: str,
    renditions: Sequence[Rendition],
    token_map: Mapping[str, str],
    *,
    host: str = DEFAULT_DOWNLOAD_HOST,
) -> str:
    """Master playlist referencing each variant playlist by its tokenized download URL."""
    uris = [
        build_download_url(
            bucket,
            join_object_path(destination_prefix, r.playlist_name),
            token_map,
            host=host,
        )
        for r in renditions
    ]
    return _render_master(renditions, uris)


def is_segment_reference(line: str) -> bool:
    return bool(line) and not line.startswith(COMMENT_MARKER) and line.endswith(SEGMENT_EXTENSION)


def rewrite_variant_playlist(
    raw: str,
    destination_prefix: str,
    bucket: str,
    token_map: Mapping[str, str],
    *,
    host: str = DEFAULT_DOWNLOAD_HOST,
) -> str:
    """Replace relative segment references with tokenized download URLs.

    Comment, blank and unknown lines pass through untouched; the line count is
    preserved.
    """
    out: list[str] = []
    for line in _LINE_BREAK.split(raw):
        if is_segment_reference(line):
            object_path = join_object_path(destination_prefix, line)
            out.append(build_download_url(bucket, object_path, token_map, host=host))
        else:
            out.append(line)
    return "\n".join(out)
