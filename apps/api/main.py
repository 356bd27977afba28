"""HLSFlow API"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hlsflow.config import Settings
from hlsflow.pipeline.factory import create_transcode_orchestrator
from hlsflow.repositories import DatabasePool
from routes.events import router as events_router
from routes.health import router as health_router
from hlsflow.utils.logging_setup import setup_logging

settings = Settings()
setup_logging(settings)
logger = logging.getLogger("hlsflow.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.settings = settings
    app.state.orchestrator = await create_transcode_orchestrator(settings)
    logger.info(
        "API starting (bucket=%s, storage=%s, documents=%s)",
        settings.storage.bucket,
        settings.storage.backend,
        settings.document_store.backend,
    )
    try:
        yield
    finally:
        orchestrator = getattr(app.state, "orchestrator", None)
        if orchestrator is not None:
            await orchestrator.records.store.close()
        await DatabasePool.close()


app = FastAPI(
    title="HLSFlow API",
    description="Storage-triggered HLS transcoding",
    version="0.1.0",
    lifespan=lifespan,
)


app.include_router(events_router)
app.include_router(health_router)
