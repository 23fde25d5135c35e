"""Upload gate and record creation for uploaded videos."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from vidsum.config import Settings
from vidsum.error_codes import ErrorCode
from vidsum.exceptions import UploadRejectedError
from vidsum.models.video import VideoRecord, VideoStage, new_video_id
from vidsum.providers.media.base import MediaToolProvider
from vidsum.services.video_store import VideoStore
from vidsum.storage.staging import StagingArea
from vidsum.utils.media_signature import sniff_video_file

logger = logging.getLogger(__name__)


def _sanitize_title(filename: str | None) -> str:
    raw = str(filename or "").strip()
    base = Path(raw).name.replace("\x00", "")
    return base[:255] or "untitled"


class VideoService:
    def __init__(
        self,
        settings: Settings,
        store: VideoStore,
        staging: StagingArea,
        media_tool: MediaToolProvider,
    ) -> None:
        self.settings = settings
        self.store = store
        self.staging = staging
        self.media_tool = media_tool

    def check_declared(self, filename: str | None, content_type: str | None) -> str:
        """Validate declared name and type before any bytes are stored.

        Returns the normalized file extension.
        """
        upload = self.settings.upload
        ext = Path(str(filename or "")).suffix.lower()
        if ext not in {e.lower() for e in upload.allowed_extensions}:
            raise UploadRejectedError(f"file extension not allowed: {ext or '(none)'}")
        declared = str(content_type or "").split(";", 1)[0].strip().lower()
        if declared not in {t.lower() for t in upload.allowed_content_types}:
            raise UploadRejectedError(f"content type not allowed: {declared or '(none)'}")
        return ext

    def staging_path(self, video_id: str, extension: str) -> str:
        return self.staging.video_path(video_id, extension)

    async def verify_staged(self, path: str) -> str:
        """Check the stored bytes by content signature; delete the file on mismatch."""
        try:
            sniffed = await asyncio.to_thread(sniff_video_file, path)
        except OSError as exc:
            await self.staging.delete(path)
            raise UploadRejectedError(f"uploaded file is unreadable: {exc}") from exc
        allowed = {t.lower() for t in self.settings.upload.allowed_content_types}
        if sniffed is None or sniffed not in allowed:
            await self.staging.delete(path)
            logger.info("upload rejected by signature check (path=%s, sniffed=%s)", Path(path).name, sniffed)
            raise UploadRejectedError("file content is not a supported video format")
        return sniffed

    async def _probe_duration(self, path: str) -> float | None:
        try:
            probe = await self.media_tool.probe(path)
        except Exception as exc:
            logger.warning("duration probe failed (path=%s): %s", Path(path).name, exc)
            return None
        return probe.duration_seconds

    async def register_upload(
        self,
        *,
        video_id: str,
        path: str,
        filename: str | None,
        title: str | None = None,
    ) -> VideoRecord:
        """Verify a staged upload and create its record in `uploaded`."""
        if not await self.staging.exists(path):
            raise UploadRejectedError("uploaded file is missing")
        size = await self.staging.size(path)
        limit = int(self.settings.upload.max_bytes)
        if size > limit:
            await self.staging.delete(path)
            raise UploadRejectedError(
                f"file is {size} bytes, limit is {limit} bytes",
                error_code=ErrorCode.PAYLOAD_TOO_LARGE,
            )
        mime_type = await self.verify_staged(path)

        record = VideoRecord(
            id=video_id,
            title=str(title or "").strip() or _sanitize_title(filename),
            stage=VideoStage.UPLOADED,
            source_location=path,
            mime_type=mime_type,
            size_bytes=size,
            duration_seconds=await self._probe_duration(path),
        )
        await self.store.create(record)
        logger.info(
            "video uploaded (video_id=%s, bytes=%s, mime_type=%s)", record.id, size, mime_type
        )
        return record

    async def import_file(self, source_path: str, *, title: str | None = None) -> VideoRecord:
        """Copy a local file into staging and register it like an upload."""
        src = Path(source_path)
        ext = self.check_declared(src.name, _guess_content_type(src))
        video_id = new_video_id()
        path = self.staging_path(video_id, ext)
        await self.staging.write(path, await asyncio.to_thread(src.read_bytes))
        return await self.register_upload(video_id=video_id, path=path, filename=src.name, title=title)

    async def get(self, video_id: str) -> VideoRecord | None:
        return await self.store.get(video_id)


def _guess_content_type(path: Path) -> str | None:
    try:
        sniffed = sniff_video_file(str(path))
    except OSError:
        return None
    return sniffed
