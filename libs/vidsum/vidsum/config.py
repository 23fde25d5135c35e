"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict

from vidsum.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]

_MIB = 1024 * 1024


def _resolve_repo_path(value: str) -> str:
    raw = str(value or "").strip()
    if not raw:
        return raw
    p = Path(raw)
    if p.is_absolute():
        return str(p)
    return str((_REPO_ROOT / p).resolve())


class MediaToolConfig(BaseSettings):
    """ffmpeg / ffprobe configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    extract_timeout_s: float = Field(default=60.0, gt=0)
    probe_timeout_s: float = Field(default=30.0, gt=0)

    # Output format of the extracted audio artifact
    codec: str = "pcm_s16le"
    sample_rate: int = Field(default=44100, ge=8000)
    channels: int = Field(default=2, ge=1, le=8)


class InferenceConfig(BaseSettings):
    """Remote inference (transcription + summarization) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INFERENCE_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "gemini"
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("api_key", "INFERENCE_API_KEY", "GOOGLE_API_KEY"),
    )
    model: str = "gemini-2.0-flash-exp"
    # Only used by openai-compatible endpoints; Gemini uses its public endpoint unless set.
    base_url: str | None = None
    # Optional separate model for /audio/transcriptions on openai-compatible endpoints.
    transcription_model: str | None = None
    timeout_s: float = Field(default=120.0, gt=0)
    max_audio_bytes: int = Field(
        default=20 * _MIB,
        ge=1,
        description="Inline audio payload ceiling; larger artifacts are rejected before any call.",
    )


class IngestConfig(BaseSettings):
    """Remote URL ingestion (yt-dlp) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INGEST_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url_pattern: str = r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/.+"
    audio_format: str = "wav"
    # yt-dlp audio quality: 0 (best) .. 10 (worst)
    audio_quality: int = Field(default=9, ge=0, le=10)
    socket_timeout_s: float = Field(default=30.0, gt=0)


class UploadConfig(BaseSettings):
    """Upload gate configuration."""

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_bytes: int = Field(default=20 * _MIB, ge=1)
    allowed_content_types: list[str] = [
        "video/mp4",
        "video/x-msvideo",
        "video/quicktime",
        "video/x-matroska",
        "video/webm",
        "video/x-flv",
    ]
    allowed_extensions: list[str] = [".mp4", ".avi", ".mov", ".mkv", ".webm", ".flv"]


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    # Relative to log_dir; empty disables the file handler.
    file: str | None = "vidsum.log"
    # Per-logger overrides, e.g. {"vidsum.pipeline": "DEBUG", "httpx": "INFO"}.
    levels: dict[str, str] = Field(default_factory=dict)
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    data_dir: str = "./data"
    log_dir: str = "./logs"

    # Redis (record store)
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "vidsum"
    record_ttl_days: int | None = Field(default=None, ge=1)

    media: MediaToolConfig = MediaToolConfig()
    inference: InferenceConfig = InferenceConfig()
    ingest: IngestConfig = IngestConfig()
    upload: UploadConfig = UploadConfig()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        # Apps run from apps/* change CWD; keep paths stable.
        self.data_dir = _resolve_repo_path(self.data_dir)
        self.log_dir = _resolve_repo_path(self.log_dir)
        return self

    def model_post_init(self, __context: Any) -> None:
        for p in (self.data_dir, self.log_dir):
            Path(p).mkdir(parents=True, exist_ok=True)

    @property
    def record_ttl_seconds(self) -> int | None:
        if self.record_ttl_days is None:
            return None
        return int(self.record_ttl_days) * 24 * 3600

    def inference_config(self) -> dict[str, Any]:
        """Return an inference config dict for the provider registry."""
        cfg = self.inference.model_dump()
        provider = str(cfg.get("provider") or "").strip().lower()
        if not provider:
            raise ConfigurationError("inference provider is not configured")
        cfg["provider"] = provider

        base_url = str(cfg.get("base_url") or "").strip()
        if provider in {"openai", "openai_compat"}:
            cfg["base_url"] = base_url or "https://api.openai.com/v1"
        elif base_url:
            cfg["base_url"] = base_url
        else:
            cfg.pop("base_url", None)
        return cfg
