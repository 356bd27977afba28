"""Cloud Firestore document store."""

from __future__ import annotations

import asyncio
from typing import Any
from collections.abc import Mapping

from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore

from hlsflow.exceptions import ReconcileError
from hlsflow.repositories.document_store import DocumentStore


class FirestoreDocumentStore(DocumentStore):
    def __init__(
        self,
        *,
        project: str | None = None,
        database: str | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        self.project = project
        self.database = database
        self._client: firestore.Client | None = client

    def _ensure_client(self) -> firestore.Client:
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.project:
                kwargs["project"] = self.project
            if self.database:
                kwargs["database"] = self.database
            self._client = firestore.Client(**kwargs)
        return self._client

    async def merge(
        self,
        document_path: str,
        data: Mapping[str, Any],
        *,
        timestamp_field: str | None = "updatedAt",
    ) -> None:
        payload = dict(data)
        if timestamp_field:
            payload[timestamp_field] = firestore.SERVER_TIMESTAMP
        doc = self._ensure_client().document(document_path)
        try:
            await asyncio.to_thread(doc.set, payload, merge=True)
        except GoogleAPIError as exc:
            raise ReconcileError(document_path, str(exc)) from exc

    async def close(self) -> None:
        if self._client is not None:
            await asyncio.to_thread(self._client.close)
            self._client = None
