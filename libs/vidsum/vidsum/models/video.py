"""Video record model (pipeline state unit)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class VideoStage(str, Enum):
    UPLOADED = "uploaded"
    DOWNLOADING = "downloading"
    AUDIO_EXTRACTED = "audio_extracted"
    TRANSCRIBED = "transcribed"
    SUMMARIZED = "summarized"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _dt_to_iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def _dt_from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _as_float(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _as_int(value: object) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass
class VideoRecord:
    id: str
    title: str
    stage: VideoStage = VideoStage.UPLOADED
    source_location: str | None = None
    audio_location: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = None
    duration_seconds: float | None = None
    transcript: str | None = None
    summary: str | None = None
    remote_source_url: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def mark_failed(self, error_code: str, error_message: str) -> None:
        self.stage = VideoStage.FAILED
        self.error_code = str(error_code)
        self.error_message = str(error_message)

    def clear_error(self) -> None:
        self.error_code = None
        self.error_message = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "stage": self.stage.value,
            "source_location": self.source_location,
            "audio_location": self.audio_location,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "duration_seconds": self.duration_seconds,
            "transcript": self.transcript,
            "summary": self.summary,
            "remote_source_url": self.remote_source_url,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "created_at": _dt_to_iso(self.created_at),
            "updated_at": _dt_to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VideoRecord":
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            stage=VideoStage(str(data.get("stage") or VideoStage.UPLOADED.value)),
            source_location=data.get("source_location"),
            audio_location=data.get("audio_location"),
            mime_type=data.get("mime_type"),
            size_bytes=_as_int(data.get("size_bytes")),
            duration_seconds=_as_float(data.get("duration_seconds")),
            transcript=data.get("transcript"),
            summary=data.get("summary"),
            remote_source_url=data.get("remote_source_url"),
            error_code=data.get("error_code"),
            error_message=data.get("error_message"),
            created_at=_dt_from_iso(data.get("created_at")) or _utcnow(),
            updated_at=_dt_from_iso(data.get("updated_at")) or _utcnow(),
        )

    def to_public_dict(self) -> dict[str, Any]:
        """Caller-facing view; staging paths never leave the pipeline."""
        return {
            "id": self.id,
            "title": self.title,
            "stage": self.stage.value,
            "size_bytes": self.size_bytes,
            "duration_seconds": self.duration_seconds,
            "transcript": self.transcript,
            "summary": self.summary,
            "remote_source_url": self.remote_source_url,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "created_at": _dt_to_iso(self.created_at),
            "updated_at": _dt_to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one pipeline transition."""

    record: VideoRecord
    already_done: bool = False

    @property
    def stage(self) -> VideoStage:
        return self.record.stage

    def to_dict(self) -> dict[str, Any]:
        return {"already_done": bool(self.already_done), "video": self.record.to_public_dict()}


def new_video_id() -> str:
    return f"vid_{uuid.uuid4().hex}"
