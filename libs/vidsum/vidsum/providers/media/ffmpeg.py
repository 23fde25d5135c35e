"""FFmpeg/ffprobe-based media tool."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError
from vidsum.providers.media.base import MediaProbe, MediaToolProvider
from vidsum.utils.ffmpeg import resolve_ffmpeg_bin, resolve_ffprobe_bin
from vidsum.utils.subprocess import SubprocessTimeout, run_subprocess

logger = logging.getLogger(__name__)


def _parse_fraction(value: object) -> float | None:
    if value is None:
        return None
    raw = str(value).strip()
    if not raw or raw == "N/A":
        return None
    if "/" in raw:
        num, den = raw.split("/", 1)
        try:
            return float(num) / float(den)
        except (ValueError, ZeroDivisionError):
            return None
    try:
        return float(raw)
    except ValueError:
        return None


def _tail(raw: bytes, limit: int = 2000) -> str:
    text = raw.decode(errors="ignore").strip()
    if len(text) > limit:
        return "…" + text[-limit:]
    return text


class FFmpegMediaTool(MediaToolProvider):
    def __init__(
        self,
        ffmpeg_bin: str = "ffmpeg",
        ffprobe_bin: str = "ffprobe",
        *,
        probe_timeout_s: float = 30.0,
        codec: str = "pcm_s16le",
        sample_rate: int = 44100,
        channels: int = 2,
    ) -> None:
        self.ffmpeg_bin = resolve_ffmpeg_bin(ffmpeg_bin)
        self.ffprobe_bin = resolve_ffprobe_bin(ffprobe_bin)
        self.probe_timeout_s = float(probe_timeout_s)
        self.codec = str(codec)
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)

    async def probe(self, path: str) -> MediaProbe:
        args = [
            self.ffprobe_bin,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]
        try:
            result = await run_subprocess(args, timeout_s=self.probe_timeout_s)
        except FileNotFoundError as exc:
            raise ProviderError(
                "ffprobe",
                f"ffprobe binary not found: {self.ffprobe_bin}. "
                "Install ffmpeg and ensure ffprobe is in PATH (or set MEDIA_FFPROBE_BIN).",
                error_code=ErrorCode.EXTRACTION_FAILED,
            ) from exc
        except SubprocessTimeout as exc:
            raise ProviderError(
                "ffprobe", str(exc), error_code=ErrorCode.EXTRACTION_TIMEOUT
            ) from exc
        if result.returncode != 0:
            raise ProviderError(
                "ffprobe",
                f"probe failed (code={result.returncode}): {_tail(result.stderr)}",
                error_code=ErrorCode.EXTRACTION_FAILED,
            )

        try:
            payload = json.loads(result.stdout.decode("utf-8", errors="ignore") or "{}")
        except json.JSONDecodeError as exc:
            raise ProviderError(
                "ffprobe", f"unreadable probe output: {exc}", error_code=ErrorCode.EXTRACTION_FAILED
            ) from exc

        format_info = dict(payload.get("format") or {})
        streams = list(payload.get("streams") or [])

        duration = _parse_fraction(format_info.get("duration"))
        has_audio = False
        has_video = False
        for stream in streams:
            codec_type = stream.get("codec_type")
            if codec_type == "audio":
                has_audio = True
            elif codec_type == "video":
                has_video = True
            else:
                continue
            stream_duration = _parse_fraction(stream.get("duration"))
            if stream_duration and (duration is None or stream_duration > duration):
                duration = stream_duration

        return MediaProbe(
            has_audio=has_audio,
            has_video=has_video,
            duration_seconds=duration,
            format_name=format_info.get("format_name"),
        )

    async def extract_audio(self, input_path: str, output_path: str, *, timeout_s: float) -> str:
        input_path = str(input_path)
        output_path = str(output_path)
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        args = [
            self.ffmpeg_bin,
            "-y",
            "-i",
            input_path,
            "-vn",
            "-acodec",
            self.codec,
            "-ar",
            str(self.sample_rate),
            "-ac",
            str(self.channels),
            output_path,
        ]
        started = time.perf_counter()
        try:
            result = await run_subprocess(args, timeout_s=timeout_s)
        except FileNotFoundError as exc:
            raise ProviderError(
                "ffmpeg",
                f"ffmpeg binary not found: {self.ffmpeg_bin}. "
                "Install ffmpeg and ensure it is in PATH (or install `imageio-ffmpeg` in the env, "
                "or set MEDIA_FFMPEG_BIN).",
                error_code=ErrorCode.EXTRACTION_FAILED,
            ) from exc
        except SubprocessTimeout as exc:
            raise ProviderError(
                "ffmpeg",
                f"audio extraction exceeded {float(timeout_s):g}s and was killed",
                error_code=ErrorCode.EXTRACTION_TIMEOUT,
            ) from exc

        if result.returncode != 0:
            raise ProviderError(
                "ffmpeg",
                "ffmpeg failed "
                f"(code={result.returncode}).\n"
                f"cmd: {' '.join(args)}\n"
                f"stderr: {_tail(result.stderr)}",
                error_code=ErrorCode.EXTRACTION_FAILED,
            )

        # A zero exit code alone is not trusted: the output must exist and be non-empty.
        out = Path(output_path)
        if not out.is_file() or out.stat().st_size == 0:
            raise ProviderError(
                "ffmpeg",
                f"audio file was not created: {output_path}",
                error_code=ErrorCode.EXTRACTION_FAILED,
            )

        logger.info(
            "audio extracted (output=%s, bytes=%d, latency_ms=%d)",
            out.name,
            out.stat().st_size,
            int((time.perf_counter() - started) * 1000),
        )
        return output_path
