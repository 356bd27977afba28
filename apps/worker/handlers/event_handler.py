"""Bucket-notification handler (S3 / MinIO `s3:ObjectCreated:*`)."""

from __future__ import annotations

import logging
from typing import Any

from hlsflow.models.event import StorageFinalizeEvent, iter_s3_records
from hlsflow.models.job import JobReport
from hlsflow.pipeline.orchestrator import TranscodeOrchestrator

logger = logging.getLogger("hlsflow.worker.events")

OBJECT_CREATED_PREFIXES = ("ObjectCreated:", "s3:ObjectCreated:")


def is_object_created(record: dict[str, Any]) -> bool:
    name = str(record.get("eventName") or "")
    return name.startswith(OBJECT_CREATED_PREFIXES)


async def process_notification(payload: Any, *, orchestrator: TranscodeOrchestrator) -> list[JobReport]:
    """Run the pipeline once per object-created record; other records are skipped."""
    reports: list[JobReport] = []
    for record in iter_s3_records(payload):
        if not is_object_created(dict(record)):
            logger.debug("skipping record %s", record.get("eventName"))
            continue
        try:
            event = StorageFinalizeEvent.from_s3_record(record)
        except ValueError as exc:
            logger.warning("malformed bucket notification record: %s", exc)
            continue
        report = await orchestrator.handle(event)
        if not report.ignored:
            logger.info(
                "processed %s (succeeded=%s, state=%s, code=%s)",
                event.name,
                report.succeeded,
                report.state.value,
                report.error_code or "-",
            )
        reports.append(report)
    return reports
