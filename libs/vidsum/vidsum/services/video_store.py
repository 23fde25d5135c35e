"""Video record persistence backed by Redis (whole-document JSON)."""

from __future__ import annotations

import json

from redis.asyncio import Redis

from vidsum.models.video import VideoRecord


class VideoStore:
    """Document store for `VideoRecord`.

    Every write replaces the whole document with a single `SET`, so readers see
    either the previous or the next record, never a partial update.
    """

    def __init__(
        self,
        redis_client: Redis,
        *,
        key_prefix: str = "vidsum",
        ttl_seconds: int | None = None,
    ) -> None:
        self._redis = redis_client
        self._prefix = str(key_prefix or "vidsum").strip(":")
        self._ttl_seconds = max(1, int(ttl_seconds)) if ttl_seconds else None

    def key(self, video_id: str) -> str:
        return f"{self._prefix}:video:{video_id}"

    def _index_key(self) -> str:
        return f"{self._prefix}:videos"

    async def get(self, video_id: str) -> VideoRecord | None:
        raw = await self._redis.get(self.key(video_id))
        if not raw:
            return None
        return VideoRecord.from_dict(json.loads(raw))

    async def create(self, record: VideoRecord) -> VideoRecord:
        await self.save(record)
        await self._redis.sadd(self._index_key(), record.id)
        return record

    async def save(self, record: VideoRecord) -> None:
        record.touch()
        await self._redis.set(
            self.key(record.id),
            json.dumps(record.to_dict(), ensure_ascii=False),
            ex=self._ttl_seconds,
        )

    async def list_ids(self) -> list[str]:
        members = await self._redis.smembers(self._index_key())
        return sorted(m.decode("utf-8") if isinstance(m, bytes) else str(m) for m in members)
