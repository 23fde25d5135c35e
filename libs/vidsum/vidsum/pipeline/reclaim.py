"""Offline sweep for staged files a crashed transition left behind."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from vidsum.models.video import VideoRecord, VideoStage
from vidsum.services.video_store import VideoStore
from vidsum.storage.staging import StagedFile, StagingArea

logger = logging.getLogger(__name__)


@dataclass
class ReclaimReport:
    scanned: int = 0
    reclaimed: list[StagedFile] = field(default_factory=list)
    kept: int = 0
    errors: list[str] = field(default_factory=list)


def stale_reason(staged: StagedFile, record: VideoRecord | None) -> str | None:
    """Why `staged` no longer belongs to any live transition, or None to keep it."""
    if record is None:
        return "record missing"
    if record.stage == VideoStage.DOWNLOADING:
        return None
    if staged.kind == "video":
        if staged.path != record.source_location:
            return "superseded source"
        if record.transcript is not None or record.stage not in {VideoStage.UPLOADED, VideoStage.FAILED}:
            return "audio already extracted"
        return None
    if staged.kind == "audio":
        if record.transcript is not None:
            return "already transcribed"
        if staged.path != record.audio_location:
            return "not the committed audio artifact"
        return None
    return None


async def reclaim_staged_files(
    store: VideoStore,
    staging: StagingArea,
    *,
    dry_run: bool = False,
    min_age_s: float = 3600.0,
) -> ReclaimReport:
    """Delete staged files whose record is gone or has moved past the file's stage.

    Files younger than `min_age_s` are skipped so in-flight transitions are left alone.
    """
    report = ReclaimReport()
    now = time.time()
    records: dict[str, VideoRecord | None] = {}
    for staged in await staging.list_staged():
        report.scanned += 1
        if min_age_s > 0 and now - staged.modified_at < min_age_s:
            report.kept += 1
            continue
        if staged.video_id not in records:
            records[staged.video_id] = await store.get(staged.video_id)
        reason = stale_reason(staged, records[staged.video_id])
        if reason is None:
            report.kept += 1
            continue
        if dry_run:
            logger.info(
                "would reclaim staged file (video_id=%s, kind=%s, reason=%s)",
                staged.video_id,
                staged.kind,
                reason,
            )
            report.reclaimed.append(staged)
            continue
        try:
            await staging.delete(staged.path)
        except OSError as exc:
            report.errors.append(f"{staged.path}: {exc}")
            logger.warning("staged file reclaim failed (path=%s): %s", staged.path, exc)
            continue
        logger.info(
            "staged file reclaimed (video_id=%s, kind=%s, reason=%s)",
            staged.video_id,
            staged.kind,
            reason,
        )
        report.reclaimed.append(staged)
    return report
