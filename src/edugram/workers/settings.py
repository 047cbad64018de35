"""arq worker settings for the out-of-process verification sweep.

Import path for arq CLI: arq edugram.workers.settings.WorkerSettings

Run this instead of the in-process sweeper by setting
EDUGRAM_VERIFICATION_SWEEPER_ENABLED=false on the API.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from arq import cron
from arq.connections import RedisSettings

from edugram.config import get_settings
from edugram.store import KeyValueStore
from edugram.verification.service import process_due

logger = logging.getLogger(__name__)


async def startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Open the store connection used by the sweep."""
    settings = get_settings()
    client = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=5,
    )
    ctx["kv_redis"] = client
    ctx["store"] = KeyValueStore(client)
    logger.info("Verification worker started")


async def shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    client: aioredis.Redis | None = ctx.get("kv_redis")
    if client:
        await client.aclose()
    logger.info("Verification worker shut down")


async def sweep_verifications(ctx: dict) -> int:  # type: ignore[type-arg]
    """Approve every verification whose review is due."""
    approved = await process_due(ctx["store"])
    if approved > 0:
        logger.info("Approved %d pending verifications", approved)
    return approved


class WorkerSettings:
    """arq worker settings for the verification sweep."""

    functions = [sweep_verifications]
    cron_jobs = [
        # Every second; review delay is a few seconds
        cron(sweep_verifications, second=set(range(60)), run_at_startup=True, unique=True),
    ]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(get_settings().redis_url)
    max_jobs = 2
