from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
from pathlib import Path

from hlsflow.config import Settings
from hlsflow.models.event import StorageFinalizeEvent
from hlsflow.pipeline.orchestrator import TranscodeOrchestrator
from hlsflow.providers import get_encoder
from hlsflow.repositories import DatabasePool, InMemoryDocumentStore, MediaRecordRepository, get_document_store
from hlsflow.storage import LocalObjectStore
from hlsflow.utils.logging_setup import setup_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the HLS transcode pipeline on a local video against a filesystem bucket."
    )
    parser.add_argument("--media", required=True, help="Path to a local .mp4/.mov file")
    parser.add_argument(
        "--object-path",
        required=True,
        help="Object path the upload is simulated at, e.g. videos/public/acme/homeBackground.mp4",
    )
    parser.add_argument("--bucket", default="local-bucket", help="Bucket name used for URLs")
    parser.add_argument("--content-type", default=None, help="Defaults to a guess from --media")
    parser.add_argument(
        "--metadata",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Custom metadata entry (repeatable), e.g. transcode=hls",
    )
    parser.add_argument(
        "--documents",
        choices=["memory", "configured"],
        default="memory",
        help="Record reconciliation target (default: in-memory, printed at the end)",
    )
    return parser.parse_args()


def _metadata(entries: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for entry in entries:
        key, sep, value = str(entry).partition("=")
        if not sep or not key.strip():
            raise SystemExit(f"invalid --metadata entry: {entry!r}")
        out[key.strip()] = value.strip()
    return out


async def _run() -> int:
    args = _parse_args()
    media_path = Path(args.media)
    if not media_path.exists():
        raise SystemExit(f"Media not found: {media_path}")

    settings = Settings()
    setup_logging(settings)

    store = LocalObjectStore(
        settings.storage.local_dir,
        args.bucket,
        token_metadata_key=settings.storage.token_metadata_key,
    )
    content_type = args.content_type or mimetypes.guess_type(media_path.name)[0] or "video/mp4"
    await store.upload_file(media_path, args.object_path, content_type=content_type)

    if args.documents == "memory":
        documents = InMemoryDocumentStore()
    else:
        documents = await get_document_store(settings)

    orchestrator = TranscodeOrchestrator(
        settings,
        store,
        get_encoder(settings.encoder),
        MediaRecordRepository(documents),
    )
    event = StorageFinalizeEvent(
        bucket=args.bucket,
        name=args.object_path,
        content_type=content_type,
        metadata=_metadata(args.metadata),
    )
    try:
        report = await orchestrator.handle(event)
    finally:
        await documents.close()
        await DatabasePool.close()

    out = report.to_dict()
    if isinstance(documents, InMemoryDocumentStore):
        out["documents"] = {k: {f: str(v) for f, v in doc.items()} for k, doc in documents.documents.items()}
    print(json.dumps(out, ensure_ascii=False, indent=2))
    if report.ignored:
        return 0
    return 0 if report.succeeded else 1


def main() -> None:
    raise SystemExit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
