"""Provider factory and registry."""

from __future__ import annotations

from typing import Any
from collections.abc import Mapping

from vidsum.exceptions import ConfigurationError
from vidsum.providers.inference.base import InferenceProvider
from vidsum.providers.ingest.base import IngestionProvider
from vidsum.providers.media.base import MediaToolProvider


def get_media_tool(config: Mapping[str, Any]) -> MediaToolProvider:
    """Get the media tool (probe + audio extraction) based on configuration."""
    provider_type = str(config.get("provider", "ffmpeg")).strip().lower()

    match provider_type:
        case "ffmpeg" | "default":
            from vidsum.providers.media.ffmpeg import FFmpegMediaTool

            return FFmpegMediaTool(
                ffmpeg_bin=str(config.get("ffmpeg_bin") or "ffmpeg"),
                ffprobe_bin=str(config.get("ffprobe_bin") or "ffprobe"),
                probe_timeout_s=float(config.get("probe_timeout_s", 30.0)),
                codec=str(config.get("codec") or "pcm_s16le"),
                sample_rate=int(config.get("sample_rate", 44100)),
                channels=int(config.get("channels", 2)),
            )
        case _:
            raise ConfigurationError(f"Unknown media tool provider: {provider_type}")


def get_inference_provider(config: Mapping[str, Any]) -> InferenceProvider:
    """Get inference provider based on configuration."""
    provider_type = str(config.get("provider", "gemini")).strip().lower()

    match provider_type:
        case "gemini":
            from vidsum.providers.inference.gemini import GeminiProvider

            api_key = str(config.get("api_key") or "").strip()
            model = str(config.get("model") or "").strip()
            if not api_key or not model:
                raise ConfigurationError(
                    f"Gemini provider requires api_key/model (got api_key={bool(api_key)} model={model!r})"
                )
            return GeminiProvider(
                api_key=api_key,
                model=model,
                base_url=config.get("base_url"),
                timeout_s=float(config.get("timeout_s", 120.0)),
            )
        case "openai" | "openai_compat":
            from vidsum.providers.inference.openai_compat import OpenAICompatProvider

            return OpenAICompatProvider(
                api_key=str(config.get("api_key") or ""),
                model=str(config.get("model") or "gpt-4o-mini"),
                base_url=config.get("base_url"),
                transcription_model=config.get("transcription_model"),
                timeout_s=float(config.get("timeout_s", 120.0)),
                provider=provider_type,
            )
        case _:
            raise ConfigurationError(f"Unknown inference provider: {provider_type}")


def get_ingestion_provider(config: Mapping[str, Any]) -> IngestionProvider:
    provider_type = str(config.get("provider", "yt-dlp")).strip().lower()

    match provider_type:
        case "yt-dlp" | "ytdlp" | "default":
            from vidsum.providers.ingest.ytdlp import YtDlpIngestionProvider

            return YtDlpIngestionProvider(
                audio_format=str(config.get("audio_format") or "wav"),
                socket_timeout_s=float(config.get("socket_timeout_s", 30.0)),
                ffmpeg_bin=config.get("ffmpeg_bin"),
            )
        case _:
            raise ConfigurationError(f"Unknown ingestion provider: {provider_type}")
