"""Video pipeline API routes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from vidsum.error_codes import ErrorCode
from vidsum.exceptions import TransitionError, UploadRejectedError
from vidsum.models.video import TransitionResult, new_video_id
from vidsum.pipeline.orchestrator import VideoPipeline
from vidsum.services.video_service import VideoService

logger = logging.getLogger("vidsum.api")

router = APIRouter(prefix="/api/videos", tags=["videos"])

_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PREREQUISITE_MISSING: 409,
    ErrorCode.SOURCE_MISSING: 404,
    ErrorCode.AUDIO_MISSING: 404,
    ErrorCode.NO_AUDIO_STREAM: 400,
    ErrorCode.UNSUPPORTED_CONTAINER: 400,
    ErrorCode.INVALID_SOURCE: 400,
    ErrorCode.INVALID_MEDIA: 400,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.EXTRACTION_TIMEOUT: 504,
    ErrorCode.EXTRACTION_FAILED: 500,
    ErrorCode.INFERENCE_FAILED: 502,
    ErrorCode.DOWNLOAD_FAILED: 502,
}


class YoutubeDownloadRequest(BaseModel):
    url: str
    title: str | None = None


def http_status_for(error_code: ErrorCode) -> int:
    return _HTTP_STATUS.get(error_code, 500)


def _pipeline(request: Request) -> VideoPipeline:
    pipeline: VideoPipeline | None = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=500, detail="pipeline not initialized")
    return pipeline


def _video_service(request: Request) -> VideoService:
    svc: VideoService | None = getattr(request.app.state, "video_service", None)
    if svc is None:
        raise HTTPException(status_code=500, detail="video service not initialized")
    return svc


def _rejected(exc: UploadRejectedError) -> HTTPException:
    return HTTPException(
        status_code=http_status_for(exc.error_code),
        detail={"error_code": exc.error_code.value, "message": exc.message},
    )


async def _run_transition(awaitable: Awaitable[TransitionResult]) -> dict[str, Any]:
    # Client disconnects must not abort a transition half-way.
    try:
        result = await asyncio.shield(awaitable)
    except TransitionError as exc:
        raise HTTPException(status_code=http_status_for(exc.error_code), detail=exc.to_dict()) from exc
    return result.to_dict()


async def _write_upload_to_path(
    upload: UploadFile,
    target_path: Path,
    *,
    max_bytes: int,
    chunk_size: int = 1024 * 1024,
) -> int:
    target_path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with target_path.open("wb") as f:
            while True:
                chunk = await upload.read(chunk_size)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise HTTPException(
                        status_code=413,
                        detail={
                            "error_code": ErrorCode.PAYLOAD_TOO_LARGE.value,
                            "message": f"file exceeds {max_bytes} bytes",
                        },
                    )
                f.write(chunk)
    except HTTPException:
        target_path.unlink(missing_ok=True)
        raise
    return written


@router.post("/upload", status_code=201)
async def upload_video(
    request: Request,
    file: UploadFile = File(...),
    title: str | None = Form(default=None),
) -> dict[str, Any]:
    svc = _video_service(request)
    try:
        try:
            ext = svc.check_declared(file.filename, file.content_type)
        except UploadRejectedError as exc:
            raise _rejected(exc) from exc

        video_id = new_video_id()
        target_path = Path(svc.staging_path(video_id, ext))
        await _write_upload_to_path(
            file, target_path, max_bytes=int(svc.settings.upload.max_bytes)
        )
        try:
            record = await svc.register_upload(
                video_id=video_id, path=str(target_path), filename=file.filename, title=title
            )
        except UploadRejectedError as exc:
            raise _rejected(exc) from exc
        return {"video": record.to_public_dict()}
    finally:
        await file.close()


@router.post("/extract-audio/{video_id}")
async def extract_audio(request: Request, video_id: str) -> dict[str, Any]:
    return await _run_transition(_pipeline(request).extract_audio(video_id))


@router.post("/transcribe/{video_id}")
async def transcribe(request: Request, video_id: str) -> dict[str, Any]:
    return await _run_transition(_pipeline(request).transcribe(video_id))


@router.post("/summarize/{video_id}")
async def summarize(request: Request, video_id: str) -> dict[str, Any]:
    return await _run_transition(_pipeline(request).summarize(video_id))


@router.post("/youtube/download", status_code=201)
async def youtube_download(request: Request, payload: YoutubeDownloadRequest) -> dict[str, Any]:
    return await _run_transition(_pipeline(request).ingest_from_url(payload.url, payload.title))


@router.get("/{video_id}")
async def get_video(request: Request, video_id: str) -> dict[str, Any]:
    record = await _video_service(request).get(video_id)
    if record is None:
        raise HTTPException(
            status_code=404,
            detail={"error_code": ErrorCode.NOT_FOUND.value, "message": "video not found"},
        )
    return {"video": record.to_public_dict()}
