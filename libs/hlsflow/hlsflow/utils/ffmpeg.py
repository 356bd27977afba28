"""FFmpeg binary resolution helper.

Resolution order: an existing explicit path, `PATH` lookup, then the binary
bundled with `imageio-ffmpeg`.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import imageio_ffmpeg

logger = logging.getLogger(__name__)


def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    ffmpeg_bin = (ffmpeg_bin or "ffmpeg").strip()

    if Path(ffmpeg_bin).is_file():
        return ffmpeg_bin

    found = shutil.which(ffmpeg_bin)
    if found:
        return found

    try:
        bundled = str(imageio_ffmpeg.get_ffmpeg_exe())
    except RuntimeError as exc:
        logger.warning("no bundled ffmpeg available (%s); keeping %r", exc, ffmpeg_bin)
        return ffmpeg_bin
    logger.info("using bundled ffmpeg %s", bundled)
    return bundled
