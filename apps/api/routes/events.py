"""Storage CloudEvent receiver (Eventarc / GCS `object.finalize`)."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from hlsflow.models.event import StorageFinalizeEvent
from hlsflow.pipeline.orchestrator import TranscodeOrchestrator

logger = logging.getLogger("hlsflow.api.events")

router = APIRouter(tags=["events"])

FINALIZE_EVENT_TYPES = frozenset(
    {
        "google.cloud.storage.object.v1.finalized",
        "OBJECT_FINALIZE",
    }
)


class EventResponse(BaseModel):
    status: str  # "ignored" | "done" | "failed"
    object_path: str | None = None
    category: str | None = None
    site_key: str | None = None
    entity_id: str | None = None
    state: str | None = None
    succeeded: bool = False
    master_url: str | None = None
    poster_url: str | None = None
    uploaded: int = 0
    error: str | None = None
    error_code: str | None = None
    failed_state: str | None = None


def _decode_json_payload(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            try:
                decoded = json.loads(base64.b64decode(raw.encode("utf-8")).decode("utf-8"))
            except (ValueError, binascii.Error, UnicodeDecodeError):
                return None
        return decoded if isinstance(decoded, dict) else None
    return None


def coerce_cloudevent(headers: Any, body: Any) -> tuple[str | None, dict[str, Any] | None]:
    """Return (event type, object resource) for binary, structured or Pub/Sub push bodies."""
    if isinstance(body, dict) and "specversion" in body:
        return body.get("type"), _decode_json_payload(body.get("data"))

    if isinstance(body, dict) and isinstance(body.get("message"), dict):
        message = body["message"]
        attributes = message.get("attributes") if isinstance(message.get("attributes"), dict) else {}
        return attributes.get("eventType"), _decode_json_payload(message.get("data"))

    return headers.get("ce-type"), _decode_json_payload(body)


def _orchestrator(request: Request) -> TranscodeOrchestrator:
    orchestrator: TranscodeOrchestrator | None = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=500, detail="orchestrator not initialized")
    return orchestrator


@router.post("/", response_model=EventResponse)
async def receive_storage_event(request: Request) -> EventResponse:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON payload") from exc

    event_type, data = coerce_cloudevent(request.headers, body)
    if event_type and event_type not in FINALIZE_EVENT_TYPES:
        logger.debug("ignoring event type %s", event_type)
        return EventResponse(status="ignored")
    if data is None:
        raise HTTPException(status_code=400, detail="Missing storage object payload")

    try:
        event = StorageFinalizeEvent.from_gcs_object(data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    report = await _orchestrator(request).handle(event)
    payload = report.to_dict()
    if report.ignored:
        status = "ignored"
    elif report.succeeded:
        status = "done"
    else:
        status = "failed"
    # Failures are reconciled onto the record; a 2xx keeps the trigger from redelivering.
    return EventResponse(status=status, **payload)
