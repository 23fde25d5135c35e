from __future__ import annotations

from collections import defaultdict
from pathlib import Path

import pytest

from vidsum.config import (
    IngestConfig,
    InferenceConfig,
    LoggingSettings,
    MediaToolConfig,
    Settings,
    UploadConfig,
)
from vidsum.exceptions import ProviderError
from vidsum.models.video import VideoRecord, new_video_id
from vidsum.pipeline.orchestrator import VideoPipeline
from vidsum.providers.inference.base import InferenceProvider
from vidsum.providers.ingest.base import IngestionProvider, RemoteMetadata
from vidsum.providers.media.base import MediaProbe, MediaToolProvider
from vidsum.services.video_store import VideoStore
from vidsum.storage.staging import StagingArea

# Minimal ISO-BMFF header: `ftyp` box with the `isom` brand.
MP4_HEADER = b"\x00\x00\x00\x18ftypisom\x00\x00\x02\x00isomiso2"


class FakeRedis:
    def __init__(self) -> None:
        self._kv: dict[str, str] = {}
        self._sets: dict[str, set[str]] = defaultdict(set)
        self.expiry: dict[str, int | None] = {}

    async def get(self, key: str) -> str | None:
        return self._kv.get(str(key))

    async def set(self, key: str, value: str, *, ex: int | None = None) -> bool:
        self._kv[str(key)] = str(value)
        self.expiry[str(key)] = ex
        return True

    async def sadd(self, key: str, *values: str) -> int:
        s = self._sets[str(key)]
        before = len(s)
        for v in values:
            s.add(str(v))
        return len(s) - before

    async def smembers(self, key: str) -> set[str]:
        return set(self._sets.get(str(key), set()))

    async def aclose(self) -> None:
        return None


class FakeMediaTool(MediaToolProvider):
    def __init__(self) -> None:
        self.probe_result = MediaProbe(has_audio=True, has_video=True, duration_seconds=2.0)
        self.probe_error: ProviderError | None = None
        self.extract_error: ProviderError | None = None
        self.write_output = True
        self.probe_calls: list[str] = []
        self.extract_calls: list[tuple[str, str, float]] = []

    async def probe(self, path: str) -> MediaProbe:
        self.probe_calls.append(str(path))
        if self.probe_error is not None:
            raise self.probe_error
        return self.probe_result

    async def extract_audio(self, input_path: str, output_path: str, *, timeout_s: float) -> str:
        self.extract_calls.append((str(input_path), str(output_path), float(timeout_s)))
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        if self.extract_error is not None:
            # leave a partial file behind, as a killed ffmpeg would
            out.write_bytes(b"RIFF partial")
            raise self.extract_error
        if self.write_output:
            out.write_bytes(b"RIFF" + b"\x00" * 64)
        return str(out)


class FakeInference(InferenceProvider):
    provider = "fake"
    model = "fake-model"

    def __init__(self) -> None:
        self.transcript = "hello from the fake transcriber"
        self.summary = "Short Summary:\nA greeting.\n\nDetailed Summary:\n1. hello"
        self.transcribe_error: ProviderError | None = None
        self.summarize_error: ProviderError | None = None
        self.transcribe_calls: list[tuple[int, str]] = []
        self.summarize_calls: list[str] = []
        self.closed = False

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        self.transcribe_calls.append((len(audio), mime_type))
        if self.transcribe_error is not None:
            raise self.transcribe_error
        return self.transcript

    async def summarize(self, transcript: str) -> str:
        self.summarize_calls.append(transcript)
        if self.summarize_error is not None:
            raise self.summarize_error
        return self.summary

    async def close(self) -> None:
        self.closed = True


class FakeIngestion(IngestionProvider):
    provider = "fake-ingest"

    def __init__(self) -> None:
        self.metadata = RemoteMetadata(title="Remote clip", duration_seconds=12.5)
        self.metadata_error: ProviderError | None = None
        self.download_error: ProviderError | None = None
        self.resolve_calls: list[str] = []
        self.download_calls: list[tuple[str, str, int]] = []

    async def resolve_metadata(self, url: str) -> RemoteMetadata:
        self.resolve_calls.append(url)
        if self.metadata_error is not None:
            raise self.metadata_error
        return self.metadata

    async def download_audio(self, url: str, output_path: str | Path, *, quality: int) -> int:
        self.download_calls.append((url, str(output_path), int(quality)))
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        if self.download_error is not None:
            out.write_bytes(b"partial")
            raise self.download_error
        data = b"RIFF" + b"\x01" * 128
        out.write_bytes(data)
        return len(data)


@pytest.fixture()
def mp4_bytes() -> bytes:
    return MP4_HEADER + b"\x00" * 256


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
        media=MediaToolConfig(),
        inference=InferenceConfig(),
        ingest=IngestConfig(),
        upload=UploadConfig(),
        logging=LoggingSettings(),
    )


@pytest.fixture()
def redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def store(redis: FakeRedis) -> VideoStore:
    return VideoStore(redis, key_prefix="test")


@pytest.fixture()
def staging(settings: Settings) -> StagingArea:
    return StagingArea(settings.data_dir)


@pytest.fixture()
def media_tool() -> FakeMediaTool:
    return FakeMediaTool()


@pytest.fixture()
def inference() -> FakeInference:
    return FakeInference()


@pytest.fixture()
def ingestion() -> FakeIngestion:
    return FakeIngestion()


@pytest.fixture()
def pipeline(
    settings: Settings,
    store: VideoStore,
    staging: StagingArea,
    media_tool: FakeMediaTool,
    inference: FakeInference,
    ingestion: FakeIngestion,
) -> VideoPipeline:
    return VideoPipeline(
        settings,
        store,
        staging,
        media_tool=media_tool,
        inference=inference,
        ingestion=ingestion,
    )


@pytest.fixture()
def make_uploaded(store: VideoStore, staging: StagingArea, mp4_bytes: bytes):
    async def _make(**overrides) -> VideoRecord:
        video_id = new_video_id()
        path = staging.video_path(video_id, ".mp4")
        await staging.write(path, mp4_bytes)
        fields = {
            "id": video_id,
            "title": "clip.mp4",
            "source_location": path,
            "mime_type": "video/mp4",
            "size_bytes": len(mp4_bytes),
        }
        fields.update(overrides)
        record = VideoRecord(**fields)
        await store.create(record)
        return record

    return _make
