from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hlsflow.config import DocumentStoreSettings, Settings, StorageSettings
from hlsflow.models.event import StorageFinalizeEvent
from hlsflow.models.job import JobReport, JobState
from hlsflow.models.rendition import DEFAULT_RENDITIONS
from hlsflow.pipeline.classifier import classify

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))


class FakeOrchestrator:
    """Classifies like the real pipeline but never touches storage or ffmpeg."""

    renditions = DEFAULT_RENDITIONS

    def __init__(self, *, succeed: bool = True) -> None:
        self.succeed = succeed
        self.events: list[StorageFinalizeEvent] = []

    async def handle(self, event: StorageFinalizeEvent) -> JobReport:
        self.events.append(event)
        report = JobReport(object_path=event.name)
        report.classification = classify(event.name, event.content_type, event.metadata)
        if report.classification.ignored:
            report.enter(JobState.DONE)
            return report
        if self.succeed:
            report.succeeded = True
            report.master_url = "https://example.test/master.m3u8"
            report.poster_url = "https://example.test/poster.jpg"
            report.uploaded = 11
        else:
            report.failed_state = JobState.ENCODING
            report.error = "rendition (rendition=480p): ffmpeg failed (code=1)"
            report.error_code = "ENCODE_FAILED"
        report.enter(JobState.DONE)
        return report


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        log_dir=str(tmp_path / "logs"),
        storage=StorageSettings(backend="local", bucket="site-bucket", local_dir=str(tmp_path / "objects")),
        document_store=DocumentStoreSettings(backend="memory"),
    )


@pytest.fixture()
def orchestrator() -> FakeOrchestrator:
    return FakeOrchestrator()


@pytest.fixture()
def app(settings: Settings, orchestrator: FakeOrchestrator) -> FastAPI:
    from routes.events import router as events_router
    from routes.health import router as health_router

    test_app = FastAPI()
    test_app.state.settings = settings
    test_app.state.orchestrator = orchestrator
    test_app.include_router(events_router)
    test_app.include_router(health_router)
    return test_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
