"""Object storage backends."""

from hlsflow.config import Settings
from hlsflow.storage.object_store import LocalObjectStore, ObjectStore


def get_object_store(settings: Settings) -> ObjectStore:
    bucket = settings.require_bucket()
    key = settings.storage.token_metadata_key
    backend = settings.storage.backend
    if backend == "gcs":
        from hlsflow.storage.gcs_store import GCSObjectStore

        return GCSObjectStore(bucket, token_metadata_key=key)
    if backend == "s3":
        from hlsflow.storage.s3_store import S3ObjectStore

        return S3ObjectStore(
            bucket,
            endpoint=settings.storage.s3_endpoint,
            access_key=settings.storage.s3_access_key,
            secret_key=settings.storage.s3_secret_key,
            region=settings.storage.s3_region,
            token_metadata_key=key,
        )
    return LocalObjectStore(settings.storage.local_dir, bucket, token_metadata_key=key)


__all__ = ["LocalObjectStore", "ObjectStore", "get_object_store"]
