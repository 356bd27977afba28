"""Business-record reconciliation for transcoded media."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from hlsflow.exceptions import ReconcileError
from hlsflow.models.classification import Category, ClassificationResult
from hlsflow.models.job import MediaStatus
from hlsflow.repositories.document_store import DocumentStore

logger = logging.getLogger(__name__)

MEDIA_TYPE_VIDEO = "video"


@dataclass(frozen=True)
class RecordShape:
    """Field names one category's record uses for the published media."""

    url_field: str
    type_field: str
    poster_field: str
    status_field: str


RECORD_SHAPES: dict[Category, RecordShape] = {
    Category.BACKGROUND: RecordShape("url", "type", "headerPosterUrl", "videoStatus"),
    Category.PRODUCT: RecordShape("mediaURL", "mediaType", "posterURL", "status"),
    Category.SECTION: RecordShape("mediaUrl", "mediaType", "posterURL", "status"),
    Category.ABOUT_PAGE: RecordShape("mediaUrl", "mediaType", "posterUrl", "status"),
}


def document_path(classification: ClassificationResult) -> str:
    site = classification.site_key
    match classification.category:
        case Category.BACKGROUND:
            return f"siteSettingsEditable/{site}"
        case Category.PRODUCT:
            return f"siteProducts/{site}/items/{classification.entity_id}"
        case Category.SECTION:
            return f"menuSections/{classification.entity_id}"
        case Category.ABOUT_PAGE:
            return f"sitePages/{site}/pages/about"
        case _:
            raise ReconcileError(
                "<none>", f"category {classification.category.value!r} has no business record"
            )


def _shape(classification: ClassificationResult) -> RecordShape:
    shape = RECORD_SHAPES.get(classification.category)
    if shape is None:
        raise ReconcileError(
            "<none>", f"category {classification.category.value!r} has no business record"
        )
    return shape


class MediaRecordRepository:
    """Merge-updates the record that owns an uploaded video."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def mark_ready(
        self,
        classification: ClassificationResult,
        master_url: str,
        poster_url: str,
    ) -> str:
        shape = _shape(classification)
        path = document_path(classification)
        data: dict[str, Any] = {
            shape.url_field: master_url,
            shape.type_field: MEDIA_TYPE_VIDEO,
            shape.poster_field: poster_url,
            shape.status_field: MediaStatus.READY.value,
        }
        await self.store.merge(path, data)
        logger.info("marked %s ready", path)
        return path

    async def mark_error(self, classification: ClassificationResult) -> str:
        shape = _shape(classification)
        path = document_path(classification)
        await self.store.merge(path, {shape.status_field: MediaStatus.ERROR.value})
        logger.info("marked %s as error", path)
        return path
