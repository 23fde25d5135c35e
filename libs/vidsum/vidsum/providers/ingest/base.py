"""Remote media ingestion provider base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RemoteMetadata:
    title: str
    duration_seconds: float | None = None
    is_collection: bool = False


class IngestionProvider(ABC):
    """Resolve and download audio from a remote media URL.

    Failures surface as `ProviderError(error_code=ErrorCode.DOWNLOAD_FAILED)`.
    """

    provider: str = "ingest"

    @abstractmethod
    async def resolve_metadata(self, url: str) -> RemoteMetadata:
        """Look up title/duration without downloading media."""
        ...

    @abstractmethod
    async def download_audio(self, url: str, output_path: str | Path, *, quality: int) -> int:
        """Download the audio track of `url` into `output_path`.

        Returns:
            Size of the written file in bytes.
        """
        ...

    async def close(self) -> None:
        return None
