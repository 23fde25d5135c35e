"""Video pipeline orchestrator (one transition per call, reclaim after commit)."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Iterable
from pathlib import Path

from vidsum.config import Settings
from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError, TransitionError
from vidsum.models.video import TransitionResult, VideoRecord, VideoStage, new_video_id
from vidsum.pipeline.locks import KeyedLock
from vidsum.providers.inference.base import InferenceProvider
from vidsum.providers.ingest.base import IngestionProvider
from vidsum.providers.media.base import MediaToolProvider
from vidsum.services.video_store import VideoStore
from vidsum.storage.staging import StagingArea

logger = logging.getLogger(__name__)

_EXTRACTABLE_STAGES = {VideoStage.UPLOADED, VideoStage.FAILED}

_AUDIO_MIME_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".opus": "audio/ogg",
    ".flac": "audio/flac",
}


def _audio_mime_type(path: str) -> str:
    return _AUDIO_MIME_TYPES.get(Path(path).suffix.lower(), "audio/wav")


def _error_code(exc: BaseException, default: ErrorCode) -> ErrorCode:
    if isinstance(exc, ProviderError) and exc.error_code is not None:
        return exc.error_code
    return default


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, ProviderError):
        return exc.message
    return str(exc) or type(exc).__name__


class VideoPipeline:
    """State machine over `VideoRecord`.

    Each transition loads the record, checks its precondition, calls one adapter and
    commits the new state in a single save. The upstream artifact is deleted only
    after that save succeeds.
    """

    def __init__(
        self,
        settings: Settings,
        store: VideoStore,
        staging: StagingArea,
        *,
        media_tool: MediaToolProvider,
        inference: InferenceProvider,
        ingestion: IngestionProvider,
        locks: KeyedLock | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.staging = staging
        self.media_tool = media_tool
        self.inference = inference
        self.ingestion = ingestion
        self.locks = locks or KeyedLock()
        self._url_re = re.compile(settings.ingest.url_pattern, re.IGNORECASE)

    async def _load(self, video_id: str, transition: str) -> VideoRecord:
        record = await self.store.get(video_id)
        if record is None:
            raise TransitionError(
                transition, "video not found", error_code=ErrorCode.NOT_FOUND, video_id=video_id
            )
        return record

    async def _reclaim(self, path: str | None, *, video_id: str, kind: str) -> bool:
        """Best-effort delete. Returns True when the file is gone afterwards."""
        if not path:
            return True
        try:
            removed = await self.staging.delete(path)
        except OSError as exc:
            logger.warning(
                "staged file reclaim failed (video_id=%s, kind=%s, path=%s): %s",
                video_id,
                kind,
                path,
                exc,
            )
            return False
        if removed:
            logger.info("staged file reclaimed (video_id=%s, kind=%s)", video_id, kind)
        return True

    async def _fail(
        self,
        record: VideoRecord,
        transition: str,
        error_code: ErrorCode,
        message: str,
        *,
        reclaim: Iterable[tuple[str | None, str]] = (),
    ) -> TransitionError:
        record.mark_failed(error_code.value, message)
        try:
            await self.store.save(record)
        except Exception:
            logger.exception(
                "failed to persist failed state (video_id=%s, transition=%s)", record.id, transition
            )
        for path, kind in reclaim:
            await self._reclaim(path, video_id=record.id, kind=kind)
        logger.warning(
            "transition failed (video_id=%s, transition=%s, error_code=%s): %s",
            record.id,
            transition,
            error_code.value,
            message,
        )
        return TransitionError(transition, message, error_code=error_code, video_id=record.id)

    @staticmethod
    def _source_path(record: VideoRecord) -> str | None:
        source = str(record.source_location or "").strip()
        if not source or source == record.remote_source_url:
            return None
        return source

    @staticmethod
    def _log_done(record: VideoRecord, transition: str, started: float) -> None:
        logger.info(
            "transition done (video_id=%s, transition=%s, stage=%s, latency_ms=%s)",
            record.id,
            transition,
            record.stage.value,
            int((time.perf_counter() - started) * 1000),
        )

    async def extract_audio(self, video_id: str) -> TransitionResult:
        transition = "extract_audio"
        async with self.locks.hold(video_id):
            started = time.perf_counter()
            record = await self._load(video_id, transition)
            source = self._source_path(record)

            if record.transcript is not None or await self.staging.exists(record.audio_location):
                await self._reclaim(source, video_id=record.id, kind="video")
                return TransitionResult(record, already_done=True)

            if record.stage not in _EXTRACTABLE_STAGES:
                raise TransitionError(
                    transition,
                    f"cannot extract audio from stage {record.stage.value}",
                    error_code=ErrorCode.PREREQUISITE_MISSING,
                    video_id=record.id,
                )

            if source is None or not await self.staging.exists(source):
                raise await self._fail(
                    record, transition, ErrorCode.SOURCE_MISSING, "raw video file is missing"
                )

            try:
                probe = await self.media_tool.probe(source)
            except Exception as exc:
                raise await self._fail(
                    record,
                    transition,
                    _error_code(exc, ErrorCode.EXTRACTION_FAILED),
                    _error_message(exc),
                    reclaim=[(source, "video")],
                ) from exc

            if record.duration_seconds is None and probe.duration_seconds is not None:
                record.duration_seconds = probe.duration_seconds
            if not probe.has_audio:
                raise await self._fail(
                    record,
                    transition,
                    ErrorCode.NO_AUDIO_STREAM,
                    "video has no audio stream",
                    reclaim=[(source, "video")],
                )

            audio_path = self.staging.audio_path(record.id)
            try:
                await self.media_tool.extract_audio(
                    source, audio_path, timeout_s=self.settings.media.extract_timeout_s
                )
            except Exception as exc:
                raise await self._fail(
                    record,
                    transition,
                    _error_code(exc, ErrorCode.EXTRACTION_FAILED),
                    _error_message(exc),
                    reclaim=[(audio_path, "audio"), (source, "video")],
                ) from exc

            if not await self.staging.exists(audio_path):
                raise await self._fail(
                    record,
                    transition,
                    ErrorCode.EXTRACTION_FAILED,
                    "audio file was not created",
                    reclaim=[(source, "video")],
                )

            record.audio_location = audio_path
            record.stage = VideoStage.AUDIO_EXTRACTED
            record.clear_error()
            try:
                await self.store.save(record)
            except Exception:
                await self._reclaim(audio_path, video_id=record.id, kind="audio")
                raise

            await self._reclaim(source, video_id=record.id, kind="video")
            self._log_done(record, transition, started)
            return TransitionResult(record)

    async def transcribe(self, video_id: str) -> TransitionResult:
        transition = "transcribe"
        async with self.locks.hold(video_id):
            started = time.perf_counter()
            record = await self._load(video_id, transition)

            if record.transcript is not None:
                if record.audio_location and await self._reclaim(
                    record.audio_location, video_id=record.id, kind="audio"
                ):
                    record.audio_location = None
                    await self.store.save(record)
                return TransitionResult(record, already_done=True)

            audio_path = record.audio_location
            if not audio_path:
                raise TransitionError(
                    transition,
                    "audio has not been extracted",
                    error_code=ErrorCode.PREREQUISITE_MISSING,
                    video_id=record.id,
                )

            if not await self.staging.exists(audio_path):
                raise await self._fail(
                    record, transition, ErrorCode.AUDIO_MISSING, "audio file is missing"
                )

            size = await self.staging.size(audio_path)
            limit = int(self.settings.inference.max_audio_bytes)
            if size > limit:
                raise await self._fail(
                    record,
                    transition,
                    ErrorCode.PAYLOAD_TOO_LARGE,
                    f"audio is {size} bytes, limit is {limit} bytes",
                    reclaim=[(audio_path, "audio")],
                )

            audio = await self.staging.read(audio_path)
            try:
                transcript = await self.inference.transcribe(audio, _audio_mime_type(audio_path))
            except Exception as exc:
                raise await self._fail(
                    record,
                    transition,
                    ErrorCode.INFERENCE_FAILED,
                    _error_message(exc),
                    reclaim=[(audio_path, "audio")],
                ) from exc

            record.transcript = transcript
            record.stage = VideoStage.TRANSCRIBED
            record.clear_error()
            await self.store.save(record)

            if await self._reclaim(audio_path, video_id=record.id, kind="audio"):
                record.audio_location = None
                try:
                    await self.store.save(record)
                except Exception as exc:
                    logger.warning(
                        "failed to clear audio_location (video_id=%s): %s", record.id, exc
                    )
            self._log_done(record, transition, started)
            return TransitionResult(record)

    async def summarize(self, video_id: str) -> TransitionResult:
        transition = "summarize"
        async with self.locks.hold(video_id):
            started = time.perf_counter()
            record = await self._load(video_id, transition)

            if record.summary is not None:
                return TransitionResult(record, already_done=True)
            if not record.transcript:
                raise TransitionError(
                    transition,
                    "video has not been transcribed",
                    error_code=ErrorCode.PREREQUISITE_MISSING,
                    video_id=record.id,
                )

            try:
                summary = await self.inference.summarize(record.transcript)
            except Exception as exc:
                raise await self._fail(
                    record, transition, ErrorCode.INFERENCE_FAILED, _error_message(exc)
                ) from exc

            record.summary = summary
            record.stage = VideoStage.SUMMARIZED
            record.clear_error()
            await self.store.save(record)
            self._log_done(record, transition, started)
            return TransitionResult(record)

    async def ingest_from_url(self, url: str, title: str | None = None) -> TransitionResult:
        transition = "ingest_from_url"
        started = time.perf_counter()
        url = str(url or "").strip()
        if not url or not self._url_re.match(url):
            raise TransitionError(
                transition, "URL is not a supported video link", error_code=ErrorCode.INVALID_SOURCE
            )

        try:
            metadata = await self.ingestion.resolve_metadata(url)
        except Exception as exc:
            raise TransitionError(
                transition, _error_message(exc), error_code=ErrorCode.DOWNLOAD_FAILED
            ) from exc
        if metadata.is_collection:
            raise TransitionError(
                transition,
                "playlists are not supported, provide a single video URL",
                error_code=ErrorCode.UNSUPPORTED_CONTAINER,
            )

        audio_format = str(self.settings.ingest.audio_format or "wav").lstrip(".")
        record = VideoRecord(
            id=new_video_id(),
            title=str(title or "").strip() or metadata.title,
            stage=VideoStage.DOWNLOADING,
            source_location=url,
            remote_source_url=url,
            mime_type=_audio_mime_type(f"x.{audio_format}"),
            duration_seconds=metadata.duration_seconds,
        )
        await self.store.create(record)
        logger.info("remote ingestion started (video_id=%s, url=%s)", record.id, url)

        async with self.locks.hold(record.id):
            audio_path = self.staging.audio_path(record.id, f".{audio_format}")
            try:
                size = await self.ingestion.download_audio(
                    url, audio_path, quality=int(self.settings.ingest.audio_quality)
                )
            except Exception as exc:
                raise await self._fail(
                    record,
                    transition,
                    ErrorCode.DOWNLOAD_FAILED,
                    _error_message(exc),
                    reclaim=[(audio_path, "audio")],
                ) from exc

            if not await self.staging.exists(audio_path):
                raise await self._fail(
                    record, transition, ErrorCode.DOWNLOAD_FAILED, "downloaded audio is missing"
                )

            record.audio_location = audio_path
            record.size_bytes = int(size)
            record.stage = VideoStage.AUDIO_EXTRACTED
            record.clear_error()
            try:
                await self.store.save(record)
            except Exception:
                await self._reclaim(audio_path, video_id=record.id, kind="audio")
                raise

            self._log_done(record, transition, started)
            return TransitionResult(record)

    async def close(self) -> None:
        await self.inference.close()
        await self.ingestion.close()
        await self.media_tool.close()
