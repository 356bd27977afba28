"""Encoder provider abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from hlsflow.models.rendition import Rendition

POSTER_NAME = "poster.jpg"


class Encoder(ABC):
    @abstractmethod
    async def extract_poster(self, source_path: str | Path, output_dir: str | Path) -> Path:
        """Write a single still frame to `output_dir/poster.jpg` and return its path."""
        raise NotImplementedError

    @abstractmethod
    async def encode_rendition(
        self,
        source_path: str | Path,
        output_dir: str | Path,
        rendition: Rendition,
    ) -> Path:
        """Write `{name}.m3u8` plus numbered segments to `output_dir`; returns the playlist path."""
        raise NotImplementedError
