"""PostgreSQL (jsonb) document store for self-hosted deployments."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from hlsflow.config import Settings
from hlsflow.exceptions import ReconcileError
from hlsflow.repositories.document_store import DocumentStore

# `||` on jsonb is a shallow merge: top-level keys in the patch win.
_MERGE_SQL = """
INSERT INTO documents (path, data, updated_at)
VALUES (%s, %s, %s)
ON CONFLICT (path) DO UPDATE
SET data = documents.data || EXCLUDED.data,
    updated_at = EXCLUDED.updated_at
"""


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class DatabasePool:
    """Process-wide pool shared by the api lifespan, the worker and scripts."""

    _pool: AsyncConnectionPool | None = None

    @classmethod
    async def get_pool(cls, settings: Settings) -> AsyncConnectionPool:
        if cls._pool is None:
            cfg = settings.document_store
            pool = AsyncConnectionPool(
                conninfo=settings.database_url,
                min_size=cfg.postgres_pool_min,
                max_size=max(cfg.postgres_pool_min, cfg.postgres_pool_max),
                open=False,
            )
            await pool.open()
            cls._pool = pool
        return cls._pool

    @classmethod
    async def close(cls) -> None:
        pool, cls._pool = cls._pool, None
        if pool is not None:
            await pool.close()


class PostgresDocumentStore(DocumentStore):
    """Stores each record as one `documents` row keyed by its `collection/id` path."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def merge(
        self,
        document_path: str,
        data: Mapping[str, Any],
        *,
        timestamp_field: str | None = "updatedAt",
    ) -> None:
        now = _utcnow()
        payload = dict(data)
        if timestamp_field:
            payload[timestamp_field] = now.isoformat()
        try:
            async with self.pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(_MERGE_SQL, (document_path, Jsonb(payload), now))
                await conn.commit()
        except psycopg.Error as exc:
            raise ReconcileError(document_path, str(exc)) from exc
