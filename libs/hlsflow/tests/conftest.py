from __future__ import annotations

from pathlib import Path

import pytest

from hlsflow.config import DocumentStoreSettings, Settings, StorageSettings
from hlsflow.exceptions import EncoderError
from hlsflow.error_codes import ErrorCode
from hlsflow.models.rendition import Rendition
from hlsflow.providers.encoder.base import POSTER_NAME, Encoder
from hlsflow.repositories import InMemoryDocumentStore, MediaRecordRepository
from hlsflow.storage import LocalObjectStore

BUCKET = "test-bucket"


class FakeEncoder(Encoder):
    """Writes a tiny but well-formed HLS package instead of running ffmpeg."""

    def __init__(self, *, fail_on_rendition: int | None = None, segments: int = 2) -> None:
        self.fail_on_rendition = fail_on_rendition
        self.segments = segments
        self.calls: list[str] = []

    async def extract_poster(self, source_path: str | Path, output_dir: str | Path) -> Path:
        assert Path(source_path).is_file()
        self.calls.append("poster")
        poster = Path(output_dir) / POSTER_NAME
        poster.write_bytes(b"\xff\xd8jpeg")
        return poster

    async def encode_rendition(
        self,
        source_path: str | Path,
        output_dir: str | Path,
        rendition: Rendition,
    ) -> Path:
        self.calls.append(rendition.name)
        index = len([c for c in self.calls if c != "poster"])
        if self.fail_on_rendition is not None and index == self.fail_on_rendition:
            raise EncoderError(
                "rendition",
                "ffmpeg failed (code=1)",
                rendition=rendition.name,
                returncode=1,
                error_code=ErrorCode.ENCODE_FAILED,
            )
        out = Path(output_dir)
        lines = ["#EXTM3U", "#EXT-X-VERSION:3", "#EXT-X-TARGETDURATION:6", ""]
        for i in range(self.segments):
            name = f"{rendition.name}_{i:03d}.ts"
            (out / name).write_bytes(b"ts" * (i + 1))
            lines.append("#EXTINF:6.000000,")
            lines.append(name)
        lines.append("#EXT-X-ENDLIST")
        playlist = out / rendition.playlist_name
        playlist.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return playlist


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        work_dir=str(tmp_path / "work"),
        log_dir=str(tmp_path / "logs"),
        storage=StorageSettings(backend="local", bucket=BUCKET, local_dir=str(tmp_path / "objects")),
        document_store=DocumentStoreSettings(backend="memory"),
    )


@pytest.fixture()
def object_store(settings: Settings) -> LocalObjectStore:
    return LocalObjectStore(settings.storage.local_dir, BUCKET)


@pytest.fixture()
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def records(documents: InMemoryDocumentStore) -> MediaRecordRepository:
    return MediaRecordRepository(documents)


@pytest.fixture()
def fake_encoder_cls() -> type[FakeEncoder]:
    return FakeEncoder
