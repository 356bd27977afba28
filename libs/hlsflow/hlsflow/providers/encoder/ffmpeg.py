"""FFmpeg-based HLS encoder."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from hlsflow.config import EncoderConfig
from hlsflow.error_codes import ErrorCode
from hlsflow.exceptions import EncoderError
from hlsflow.models.rendition import Rendition
from hlsflow.providers.encoder.base import POSTER_NAME, Encoder
from hlsflow.utils.ffmpeg import resolve_ffmpeg_bin
from hlsflow.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)


def scale_filter(rendition: Rendition) -> str:
    # Bounded by both the target box and the source size: fits inside the box
    # keeping aspect ratio, never upscales, and keeps dimensions even for x264.
    w, h = rendition.width, rendition.height
    return (
        f"scale=w='min({w},iw)':h='min({h},ih)'"
        ":force_original_aspect_ratio=decrease:force_divisible_by=2"
    )


class FFmpegEncoder(Encoder):
    def __init__(self, config: EncoderConfig) -> None:
        self.config = config
        self.ffmpeg_bin = resolve_ffmpeg_bin(config.ffmpeg_bin)

    def poster_command(self, source_path: str | Path, poster_path: str | Path) -> list[str]:
        return [
            self.ffmpeg_bin,
            "-y",
            "-i",
            str(source_path),
            "-ss",
            self.config.poster_offset,
            "-frames:v",
            "1",
            str(poster_path),
        ]

    def rendition_command(
        self,
        source_path: str | Path,
        output_dir: str | Path,
        rendition: Rendition,
    ) -> list[str]:
        out = Path(output_dir)
        gop = str(self.config.gop_size)
        return [
            self.ffmpeg_bin,
            "-y",
            "-i",
            str(source_path),
            "-map",
            "0:v:0",
            # Optional audio: sources without an audio track still encode.
            "-map",
            "0:a:0?",
            "-c:v",
            "libx264",
            "-c:a",
            "aac",
            "-preset",
            self.config.preset,
            "-profile:v",
            "main",
            "-sc_threshold",
            "0",
            "-max_muxing_queue_size",
            "1024",
            "-g",
            gop,
            "-keyint_min",
            gop,
            "-b:v",
            rendition.video_bitrate,
            "-b:a",
            rendition.audio_bitrate,
            "-vf",
            scale_filter(rendition),
            "-pix_fmt",
            "yuv420p",
            "-f",
            "hls",
            "-hls_time",
            str(self.config.segment_seconds),
            "-hls_playlist_type",
            "vod",
            "-hls_flags",
            "independent_segments",
            "-hls_segment_filename",
            str(out / rendition.segment_pattern),
            str(out / rendition.playlist_name),
        ]

    async def _run(self, args: list[str], *, stage: str, rendition: str | None, code: ErrorCode) -> None:
        try:
            result = await run_subprocess(args, timeout_s=self.config.timeout_s)
        except FileNotFoundError as exc:
            raise EncoderError(
                stage,
                f"ffmpeg binary not found: {self.ffmpeg_bin}. Install ffmpeg, install "
                "`imageio-ffmpeg`, or set ENCODER_FFMPEG_BIN.",
                rendition=rendition,
                error_code=code,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise EncoderError(
                stage,
                f"ffmpeg timed out after {self.config.timeout_s}s",
                rendition=rendition,
                error_code=code,
            ) from exc

        if not result.ok:
            raise EncoderError(
                stage,
                f"ffmpeg failed (code={result.returncode}).\n"
                f"cmd: {' '.join(args)}\n"
                f"stderr: {result.stderr_tail()}",
                rendition=rendition,
                returncode=result.returncode,
                error_code=code,
            )

    @staticmethod
    def _require_output(path: Path, *, stage: str, rendition: str | None, code: ErrorCode) -> None:
        # ffmpeg exits 0 without writing anything when the seek lands past the end.
        if not path.is_file() or path.stat().st_size == 0:
            raise EncoderError(
                stage,
                f"ffmpeg exited cleanly but wrote no output to {path.name}",
                rendition=rendition,
                error_code=code,
            )

    async def extract_poster(self, source_path: str | Path, output_dir: str | Path) -> Path:
        poster_path = Path(output_dir) / POSTER_NAME
        await self._run(
            self.poster_command(source_path, poster_path),
            stage="poster",
            rendition=None,
            code=ErrorCode.POSTER_FAILED,
        )
        self._require_output(poster_path, stage="poster", rendition=None, code=ErrorCode.POSTER_FAILED)
        logger.info("extracted poster to %s", poster_path)
        return poster_path

    async def encode_rendition(
        self,
        source_path: str | Path,
        output_dir: str | Path,
        rendition: Rendition,
    ) -> Path:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
        await self._run(
            self.rendition_command(source_path, output_dir, rendition),
            stage="rendition",
            rendition=rendition.name,
            code=ErrorCode.ENCODE_FAILED,
        )
        playlist = Path(output_dir) / rendition.playlist_name
        self._require_output(
            playlist, stage="rendition", rendition=rendition.name, code=ErrorCode.ENCODE_FAILED
        )
        logger.info("encoded rendition %s (%s)", rendition.name, rendition.resolution)
        return playlist
