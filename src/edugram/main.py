"""FastAPI application factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from edugram.auth.router import router as auth_router
from edugram.config import get_settings
from edugram.health.router import router as health_router
from edugram.messaging.router import router as messaging_router
from edugram.middleware import setup_middleware
from edugram.notifications.router import router as notifications_router
from edugram.posts.router import router as posts_router
from edugram.profiles.router import router as profiles_router
from edugram.search.router import router as search_router
from edugram.storage.blob import PUBLIC_BUCKETS, BlobStorage, get_blob_storage
from edugram.store import close_redis, get_store, init_redis
from edugram.verification.router import router as verification_router
from edugram.verification.sweeper import VerificationSweeper

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_redis(settings.redis_url)
    get_blob_storage().ensure_buckets()

    sweeper: VerificationSweeper | None = None
    sweeper_task: asyncio.Task[None] | None = None
    if settings.verification_sweeper_enabled:
        sweeper = VerificationSweeper(get_store(), interval=settings.verification_sweep_interval_seconds)
        sweeper_task = asyncio.create_task(sweeper.start())

    logger.info("app_started", version=settings.app_version, environment=settings.environment)
    yield

    if sweeper is not None and sweeper_task is not None:
        await sweeper.stop()
        try:
            await asyncio.wait_for(sweeper_task, timeout=5)
        except asyncio.TimeoutError:
            sweeper_task.cancel()

    await close_redis()


def create_app(blobs: BlobStorage | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``blobs`` sets where the public media mounts read from; it defaults to the
    configured media root.
    """
    settings = get_settings()
    blobs = blobs or get_blob_storage()

    app = FastAPI(
        title="EduGram API",
        description="Backend API for EduGram, a college-verified student social network",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(verification_router)
    app.include_router(profiles_router)
    app.include_router(posts_router)
    app.include_router(notifications_router)
    app.include_router(search_router)
    app.include_router(messaging_router)
    for bucket in PUBLIC_BUCKETS:
        app.mount(f"/media/{bucket}", StaticFiles(directory=blobs.root / bucket, check_dir=False), name=bucket)

    return app


app = create_app()
