"""Document store interface and in-memory implementation."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any
from collections.abc import Mapping


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class DocumentStore(ABC):
    """Merge-only access to documents addressed by slash-separated paths."""

    @abstractmethod
    async def merge(
        self,
        document_path: str,
        data: Mapping[str, Any],
        *,
        timestamp_field: str | None = "updatedAt",
    ) -> None:
        """Merge `data` into the document, creating it when missing.

        When `timestamp_field` is set, the store writes its own update time
        into that field.
        """

    async def close(self) -> None:  # pragma: no cover
        return None


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store for tests and local dry runs."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.writes: list[tuple[str, dict[str, Any]]] = []

    async def merge(
        self,
        document_path: str,
        data: Mapping[str, Any],
        *,
        timestamp_field: str | None = "updatedAt",
    ) -> None:
        patch = copy.deepcopy(dict(data))
        if timestamp_field:
            patch[timestamp_field] = _utcnow()
        self.documents.setdefault(document_path, {}).update(patch)
        self.writes.append((document_path, patch))

    def get(self, document_path: str) -> dict[str, Any] | None:
        doc = self.documents.get(document_path)
        return dict(doc) if doc is not None else None
