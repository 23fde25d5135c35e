"""vidsum API"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.asyncio import Redis

from vidsum.config import Settings
from vidsum.pipeline.factory import create_video_pipeline
from routes.health import router as health_router
from routes.videos import router as videos_router
from vidsum.utils.logging_setup import setup_logging

settings = Settings()
setup_logging(settings)
logger = logging.getLogger("vidsum.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.redis = Redis.from_url(settings.redis_url, decode_responses=True)
    app.state.settings = settings
    app.state.pipeline, app.state.video_service = create_video_pipeline(settings, app.state.redis)
    logger.info(
        "API starting (redis=%s, inference=%s/%s)",
        settings.redis_url,
        settings.inference.provider,
        settings.inference.model,
    )
    try:
        yield
    finally:
        pipeline = getattr(app.state, "pipeline", None)
        if pipeline is not None:
            await pipeline.close()
        redis: Redis | None = getattr(app.state, "redis", None)
        if redis is not None:
            await redis.aclose()


app = FastAPI(
    title="vidsum API",
    description="Video transcription and summarization API",
    version="0.1.0",
    lifespan=lifespan,
)


app.include_router(videos_router)
app.include_router(health_router)
