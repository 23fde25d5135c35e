"""FFmpeg binary resolution helpers.

Prefer system `ffmpeg`, fallback to `imageio-ffmpeg` bundled binary.
`ffprobe` is not bundled by `imageio-ffmpeg`, so it resolves from PATH only.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    ffmpeg_bin = (ffmpeg_bin or "ffmpeg").strip()

    if Path(ffmpeg_bin).exists():
        return ffmpeg_bin

    found = shutil.which(ffmpeg_bin)
    if found:
        return found

    try:
        import imageio_ffmpeg

        return str(imageio_ffmpeg.get_ffmpeg_exe())
    except Exception as exc:
        logger.warning("failed to resolve bundled ffmpeg (%s); fallback to %r", exc, ffmpeg_bin)
        return ffmpeg_bin


def resolve_ffprobe_bin(ffprobe_bin: str = "ffprobe") -> str:
    ffprobe_bin = (ffprobe_bin or "ffprobe").strip()

    if Path(ffprobe_bin).exists():
        return ffprobe_bin

    found = shutil.which(ffprobe_bin)
    if found:
        return found

    logger.warning("ffprobe not found on PATH; using %r as-is", ffprobe_bin)
    return ffprobe_bin
