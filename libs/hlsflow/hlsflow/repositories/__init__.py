"""Document store backends and business-record repositories."""

from hlsflow.config import Settings
from hlsflow.repositories.document_store import DocumentStore, InMemoryDocumentStore
from hlsflow.repositories.media_record_repo import (
    RECORD_SHAPES,
    MediaRecordRepository,
    RecordShape,
    document_path,
)
from hlsflow.repositories.postgres_store import DatabasePool, PostgresDocumentStore


async def get_document_store(settings: Settings) -> DocumentStore:
    backend = settings.document_store.backend
    if backend == "firestore":
        from hlsflow.repositories.firestore_store import FirestoreDocumentStore

        return FirestoreDocumentStore(
            project=settings.document_store.firestore_project,
            database=settings.document_store.firestore_database,
        )
    if backend == "postgres":
        pool = await DatabasePool.get_pool(settings)
        return PostgresDocumentStore(pool)
    return InMemoryDocumentStore()


__all__ = [
    "DatabasePool",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MediaRecordRepository",
    "PostgresDocumentStore",
    "RECORD_SHAPES",
    "RecordShape",
    "document_path",
    "get_document_store",
]
