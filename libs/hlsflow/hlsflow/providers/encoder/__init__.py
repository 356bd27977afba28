from hlsflow.providers.encoder.base import POSTER_NAME, Encoder
from hlsflow.providers.encoder.ffmpeg import FFmpegEncoder

__all__ = ["Encoder", "FFmpegEncoder", "POSTER_NAME"]
