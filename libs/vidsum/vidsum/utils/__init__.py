"""Utility helpers."""

from vidsum.utils.ffmpeg import resolve_ffmpeg_bin, resolve_ffprobe_bin
from vidsum.utils.media_signature import sniff_video_file, sniff_video_type
from vidsum.utils.subprocess import RunResult, SubprocessTimeout, run_subprocess

__all__ = [
    "RunResult",
    "SubprocessTimeout",
    "resolve_ffmpeg_bin",
    "resolve_ffprobe_bin",
    "run_subprocess",
    "sniff_video_file",
    "sniff_video_type",
]
