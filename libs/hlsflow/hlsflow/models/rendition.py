"""HLS rendition ladder."""

from __future__ import annotations

import re
from dataclasses import dataclass

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_bitrate_kbps(value: str) -> int:
    """Parse an "Nk" bitrate string into kbps; unparsable input counts as 0."""
    m = _LEADING_INT.match(str(value or "").replace("k", "", 1))
    if m is None:
        return 0
    return int(m.group(1))


@dataclass(frozen=True)
class Rendition:
    name: str
    width: int
    height: int
    video_bitrate: str
    audio_bitrate: str

    @property
    def bandwidth(self) -> int:
        """Estimated peak bandwidth in bits/s (not measured from the encoded output)."""
        return (parse_bitrate_kbps(self.video_bitrate) + parse_bitrate_kbps(self.audio_bitrate)) * 1000

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def playlist_name(self) -> str:
        return f"{self.name}.m3u8"

    @property
    def segment_pattern(self) -> str:
        return f"{self.name}_%03d.ts"


# Order is the enumeration order of the master playlist.
DEFAULT_RENDITIONS: tuple[Rendition, ...] = (
    Rendition(name="720p", width=1280, height=720, video_bitrate="3000k", audio_bitrate="128k"),
    Rendition(name="480p", width=854, height=480, video_bitrate="1600k", audio_bitrate="128k"),
    Rendition(name="360p", width=640, height=360, video_bitrate="1000k", audio_bitrate="96k"),
)
