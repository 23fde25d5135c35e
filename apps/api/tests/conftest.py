from __future__ import annotations

import sys
from collections import defaultdict
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vidsum.config import (
    IngestConfig,
    InferenceConfig,
    LoggingSettings,
    MediaToolConfig,
    Settings,
    UploadConfig,
)
from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError
from vidsum.pipeline.orchestrator import VideoPipeline
from vidsum.providers.inference.base import InferenceProvider
from vidsum.providers.ingest.base import IngestionProvider, RemoteMetadata
from vidsum.providers.media.base import MediaProbe, MediaToolProvider
from vidsum.services.video_service import VideoService
from vidsum.services.video_store import VideoStore
from vidsum.storage.staging import StagingArea

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))


class FakeRedis:
    def __init__(self) -> None:
        self._kv: dict[str, str] = {}
        self._sets: dict[str, set[str]] = defaultdict(set)

    async def get(self, key: str) -> str | None:
        return self._kv.get(str(key))

    async def set(self, key: str, value: str, *, ex: int | None = None) -> bool:  # noqa: ARG002
        self._kv[str(key)] = str(value)
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


class StubMediaTool(MediaToolProvider):
    def __init__(self) -> None:
        self.has_audio = True
        self.extract_error: ProviderError | None = None

    async def probe(self, path: str) -> MediaProbe:  # noqa: ARG002
        return MediaProbe(has_audio=self.has_audio, has_video=True, duration_seconds=4.0)

    async def extract_audio(self, input_path: str, output_path: str, *, timeout_s: float) -> str:  # noqa: ARG002
        if self.extract_error is not None:
            raise self.extract_error
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(b"RIFF" + b"\x00" * 32)
        return str(out)


class StubInference(InferenceProvider):
    provider = "stub"
    model = "stub-model"

    def __init__(self) -> None:
        self.fail = False

    async def transcribe(self, audio: bytes, mime_type: str) -> str:  # noqa: ARG002
        if self.fail:
            raise ProviderError("stub", "service unavailable", error_code=ErrorCode.INFERENCE_FAILED)
        return "spoken words"

    async def summarize(self, transcript: str) -> str:
        if self.fail:
            raise ProviderError("stub", "service unavailable", error_code=ErrorCode.INFERENCE_FAILED)
        return f"Short Summary:\n{transcript}"


class StubIngestion(IngestionProvider):
    def __init__(self) -> None:
        self.is_collection = False

    async def resolve_metadata(self, url: str) -> RemoteMetadata:  # noqa: ARG002
        return RemoteMetadata(title="Remote talk", duration_seconds=30.0, is_collection=self.is_collection)

    async def download_audio(self, url: str, output_path: str | Path, *, quality: int) -> int:  # noqa: ARG002
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(b"RIFF" + b"\x00" * 16)
        return 20


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
def media_tool() -> StubMediaTool:
    return StubMediaTool()


@pytest.fixture()
def inference() -> StubInference:
    return StubInference()


@pytest.fixture()
def ingestion() -> StubIngestion:
    return StubIngestion()


@pytest.fixture()
def app(
    settings: Settings,
    redis: FakeRedis,
    media_tool: StubMediaTool,
    inference: StubInference,
    ingestion: StubIngestion,
) -> FastAPI:
    from routes.health import router as health_router
    from routes.videos import router as videos_router

    store = VideoStore(redis, key_prefix="apitest")
    staging = StagingArea(settings.data_dir)

    test_app = FastAPI()
    test_app.state.redis = redis
    test_app.state.settings = settings
    test_app.state.pipeline = VideoPipeline(
        settings,
        store,
        staging,
        media_tool=media_tool,
        inference=inference,
        ingestion=ingestion,
    )
    test_app.state.video_service = VideoService(settings, store, staging, media_tool)
    test_app.include_router(videos_router)
    test_app.include_router(health_router)
    return test_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def mp4_bytes() -> bytes:
    return b"\x00\x00\x00\x18ftypisom\x00\x00\x02\x00isomiso2" + b"\x00" * 512
