"""Health check routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from hlsflow.config import Settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str  # "ok"
    bucket: str
    storage_backend: str
    document_store_backend: str
    renditions: list[str]


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    settings: Settings | None = getattr(request.app.state, "settings", None)
    if settings is None:
        raise HTTPException(status_code=500, detail="settings not initialized")
    orchestrator = getattr(request.app.state, "orchestrator", None)
    renditions = [r.name for r in getattr(orchestrator, "renditions", ())]
    return HealthResponse(
        status="ok",
        bucket=str(settings.storage.bucket or ""),
        storage_backend=settings.storage.backend,
        document_store_backend=settings.document_store.backend,
        renditions=renditions,
    )
