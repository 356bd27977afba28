"""Provider factory."""

from __future__ import annotations

from hlsflow.config import EncoderConfig
from hlsflow.providers.encoder import Encoder, FFmpegEncoder


def get_encoder(config: EncoderConfig) -> Encoder:
    """Build the encoder from its injected configuration."""
    return FFmpegEncoder(config)


__all__ = ["Encoder", "FFmpegEncoder", "get_encoder"]
