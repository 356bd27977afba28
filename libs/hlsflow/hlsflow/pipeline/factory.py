"""Pipeline factories."""

from __future__ import annotations

from hlsflow.config import Settings
from hlsflow.pipeline.orchestrator import TranscodeOrchestrator
from hlsflow.providers import get_encoder
from hlsflow.repositories import MediaRecordRepository, get_document_store
from hlsflow.storage import get_object_store


async def create_transcode_orchestrator(settings: Settings) -> TranscodeOrchestrator:
    """Wire the configured object store, encoder and document store into an orchestrator."""
    store = get_object_store(settings)
    documents = await get_document_store(settings)
    return TranscodeOrchestrator(
        settings,
        store,
        get_encoder(settings.encoder),
        MediaRecordRepository(documents),
    )
