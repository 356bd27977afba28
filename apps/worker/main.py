"""HLSFlow Worker"""

import asyncio
import json
import logging

from redis.asyncio import Redis

from hlsflow.config import Settings
from hlsflow.pipeline.factory import create_transcode_orchestrator
from hlsflow.repositories import DatabasePool
from hlsflow.utils.logging_setup import setup_logging
from handlers.event_handler import process_notification


async def main():
    """Worker main entry point."""
    settings = Settings()
    setup_logging(settings)
    logger = logging.getLogger("hlsflow.worker")
    redis = Redis.from_url(settings.redis_url, decode_responses=True)
    orchestrator = await create_transcode_orchestrator(settings)

    logger.info("Worker starting (redis=%s, queue=%s)", settings.redis_url, settings.events_queue)

    try:
        while True:
            item = await redis.brpop(settings.events_queue, timeout=5)
            if not item:
                continue
            _, raw = item
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("dropping non-JSON notification: %.200s", raw)
                continue
            await process_notification(payload, orchestrator=orchestrator)
    finally:
        await redis.aclose()
        await orchestrator.records.store.close()
        await DatabasePool.close()


if __name__ == "__main__":
    asyncio.run(main())
