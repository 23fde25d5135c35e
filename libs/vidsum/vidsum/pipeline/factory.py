"""Pipeline factories."""

from __future__ import annotations

from redis.asyncio import Redis

from vidsum.config import Settings
from vidsum.pipeline.locks import KeyedLock
from vidsum.pipeline.orchestrator import VideoPipeline
from vidsum.providers import get_inference_provider, get_ingestion_provider, get_media_tool
from vidsum.services.video_service import VideoService
from vidsum.services.video_store import VideoStore
from vidsum.storage import get_staging_area


def create_video_store(settings: Settings, redis: Redis) -> VideoStore:
    return VideoStore(
        redis,
        key_prefix=settings.redis_key_prefix,
        ttl_seconds=settings.record_ttl_seconds,
    )


def create_video_pipeline(settings: Settings, redis: Redis) -> tuple[VideoPipeline, VideoService]:
    """Build the pipeline and upload service sharing one store, staging area and media tool."""
    store = create_video_store(settings, redis)
    staging = get_staging_area(settings)
    media_tool = get_media_tool(settings.media.model_dump())
    ingest_cfg = settings.ingest.model_dump()
    ingest_cfg["ffmpeg_bin"] = getattr(media_tool, "ffmpeg_bin", None)
    pipeline = VideoPipeline(
        settings,
        store,
        staging,
        media_tool=media_tool,
        inference=get_inference_provider(settings.inference_config()),
        ingestion=get_ingestion_provider(ingest_cfg),
        locks=KeyedLock(),
    )
    return pipeline, VideoService(settings, store, staging, media_tool)
