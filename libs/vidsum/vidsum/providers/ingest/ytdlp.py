"""yt-dlp backed ingestion provider."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

from yt_dlp import YoutubeDL

from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError
from vidsum.providers.ingest.base import IngestionProvider, RemoteMetadata

logger = logging.getLogger(__name__)


def _as_duration(value: Any) -> float | None:
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return None
    return duration if duration >= 0 else None


def _discard_partials(out: Path) -> list[str]:
    """Delete yt-dlp intermediates (`<stem>.webm`, `<stem>.webm.part`, ...) left next to `out`."""
    removed: list[str] = []
    for candidate in out.parent.glob(f"{out.stem}.*"):
        if candidate == out or not candidate.is_file():
            continue
        try:
            candidate.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning("failed to delete partial download %s: %s", candidate, exc)
            continue
        removed.append(candidate.name)
    return removed


class YtDlpIngestionProvider(IngestionProvider):
    provider = "yt-dlp"

    def __init__(
        self,
        *,
        audio_format: str = "wav",
        socket_timeout_s: float = 30.0,
        ffmpeg_bin: str | None = None,
    ) -> None:
        self.audio_format = str(audio_format or "wav").strip().lstrip(".") or "wav"
        self.socket_timeout_s = float(socket_timeout_s)
        self.ffmpeg_bin = ffmpeg_bin

    def _base_opts(self) -> dict[str, Any]:
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "noprogress": True,
            "socket_timeout": self.socket_timeout_s,
        }
        if self.ffmpeg_bin:
            opts["ffmpeg_location"] = self.ffmpeg_bin
        return opts

    def _extract_info_sync(self, url: str) -> dict[str, Any]:
        with YoutubeDL(self._base_opts()) as ydl:
            info = ydl.extract_info(url, download=False, process=False)
        return dict(info or {})

    async def resolve_metadata(self, url: str) -> RemoteMetadata:
        try:
            info = await asyncio.to_thread(self._extract_info_sync, url)
        except Exception as exc:
            raise ProviderError(
                self.provider, f"metadata lookup failed: {exc}", error_code=ErrorCode.DOWNLOAD_FAILED
            ) from exc
        is_collection = str(info.get("_type") or "") in {"playlist", "multi_video"}
        title = str(info.get("title") or info.get("id") or url).strip()
        return RemoteMetadata(
            title=title,
            duration_seconds=_as_duration(info.get("duration")),
            is_collection=is_collection,
        )

    def _download_sync(self, url: str, output_path: Path, quality: int) -> None:
        opts = self._base_opts()
        opts.update(
            {
                "format": "bestaudio/best",
                # Extension is replaced by the postprocessor.
                "outtmpl": str(output_path.with_suffix("")) + ".%(ext)s",
                "noplaylist": True,
                "postprocessors": [
                    {
                        "key": "FFmpegExtractAudio",
                        "preferredcodec": self.audio_format,
                        "preferredquality": str(int(quality)),
                    }
                ],
            }
        )
        with YoutubeDL(opts) as ydl:
            ydl.download([url])

    async def download_audio(self, url: str, output_path: str | Path, *, quality: int) -> int:
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        started = time.perf_counter()
        try:
            await asyncio.to_thread(self._download_sync, url, out, quality)
        except Exception as exc:
            removed = _discard_partials(out)
            if removed:
                logger.info("discarded partial download (output=%s, files=%s)", out, removed)
            raise ProviderError(
                self.provider, f"download failed: {exc}", error_code=ErrorCode.DOWNLOAD_FAILED
            ) from exc

        expected = out.with_suffix(f".{self.audio_format}")
        if not expected.exists():
            _discard_partials(out)
            raise ProviderError(
                self.provider,
                f"download produced no {self.audio_format} output",
                error_code=ErrorCode.DOWNLOAD_FAILED,
            )
        if expected != out:
            expected.replace(out)
        size = out.stat().st_size
        logger.info(
            "remote audio downloaded (output=%s, bytes=%s, latency_ms=%s)",
            out,
            size,
            int((time.perf_counter() - started) * 1000),
        )
        return size
