from __future__ import annotations

import sys
from pathlib import Path

import pytest

from hlsflow.config import DocumentStoreSettings, Settings, StorageSettings
from hlsflow.models.event import StorageFinalizeEvent
from hlsflow.models.job import JobReport, JobState
from hlsflow.pipeline.classifier import classify
from hlsflow.pipeline.orchestrator import TranscodeOrchestrator
from hlsflow.providers.encoder.base import POSTER_NAME, Encoder
from hlsflow.repositories import InMemoryDocumentStore, MediaRecordRepository
from hlsflow.storage import LocalObjectStore

_WORKER_ROOT = Path(__file__).resolve().parents[1]
if str(_WORKER_ROOT) not in sys.path:
    sys.path.insert(0, str(_WORKER_ROOT))

from handlers.event_handler import is_object_created, process_notification  # noqa: E402


class _RecordingOrchestrator:
    def __init__(self) -> None:
        self.events: list[StorageFinalizeEvent] = []

    async def handle(self, event: StorageFinalizeEvent) -> JobReport:
        self.events.append(event)
        report = JobReport(object_path=event.name)
        report.classification = classify(event.name, event.content_type, event.metadata)
        report.enter(JobState.DONE)
        return report


class _TinyEncoder(Encoder):
    async def extract_poster(self, source_path, output_dir) -> Path:
        poster = Path(output_dir) / POSTER_NAME
        poster.write_bytes(b"jpg")
        return poster

    async def encode_rendition(self, source_path, output_dir, rendition) -> Path:
        segment = Path(output_dir) / f"{rendition.name}_000.ts"
        segment.write_bytes(b"ts")
        playlist = Path(output_dir) / rendition.playlist_name
        playlist.write_text(f"#EXTM3U\n#EXTINF:6.0,\n{segment.name}\n#EXT-X-ENDLIST\n", encoding="utf-8")
        return playlist


def _record(key: str, event_name: str = "s3:ObjectCreated:Put", **obj) -> dict:
    return {
        "eventName": event_name,
        "s3": {"bucket": {"name": "media"}, "object": {"key": key, **obj}},
    }


def test_is_object_created() -> None:
    assert is_object_created({"eventName": "s3:ObjectCreated:CompleteMultipartUpload"})
    assert is_object_created({"eventName": "ObjectCreated:Put"})
    assert not is_object_created({"eventName": "s3:ObjectRemoved:Delete"})
    assert not is_object_created({})


@pytest.mark.asyncio
async def test_process_notification_only_handles_created_records() -> None:
    orchestrator = _RecordingOrchestrator()
    payload = {
        "Records": [
            _record("videos/public/acme/homeBackground.mp4", contentType="video/mp4"),
            _record("videos/public/acme/old.mp4", event_name="s3:ObjectRemoved:Delete"),
            {"eventName": "s3:ObjectCreated:Put", "s3": {"object": {}}},
        ]
    }

    reports = await process_notification(payload, orchestrator=orchestrator)

    assert [e.name for e in orchestrator.events] == ["videos/public/acme/homeBackground.mp4"]
    assert len(reports) == 1
    assert reports[0].classification.site_key == "acme"


@pytest.mark.asyncio
async def test_minio_notification_runs_full_pipeline(tmp_path: Path) -> None:
    settings = Settings(
        log_dir=str(tmp_path / "logs"),
        work_dir=str(tmp_path / "work"),
        storage=StorageSettings(backend="local", bucket="media", local_dir=str(tmp_path / "objects")),
        document_store=DocumentStoreSettings(backend="memory"),
    )
    store = LocalObjectStore(settings.storage.local_dir, "media")
    await store.upload_bytes(b"src", "videos/public/acme/sections/s1.mp4", content_type="video/mp4")
    documents = InMemoryDocumentStore()
    orchestrator = TranscodeOrchestrator(
        settings, store, _TinyEncoder(), MediaRecordRepository(documents), download_host="minio.local"
    )
    payload = [
        {
            "Event": [
                _record(
                    "videos/public/acme/sections/s1.mp4",
                    contentType="video/mp4",
                    userMetadata={"content-type": "video/mp4"},
                )
            ]
        }
    ]

    reports = await process_notification(payload, orchestrator=orchestrator)

    assert len(reports) == 1
    assert reports[0].succeeded, reports[0].error
    doc = documents.get("menuSections/s1")
    assert doc["status"] == "ready"
    assert doc["mediaUrl"].startswith("https://minio.local/v0/b/media/o/")
    assert store.list_objects("videos/public/acme/sections/hls/s1/")
