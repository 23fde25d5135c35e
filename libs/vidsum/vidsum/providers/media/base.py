"""Media tool provider abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MediaProbe:
    has_audio: bool
    has_video: bool = False
    duration_seconds: float | None = None
    format_name: str | None = None


class MediaToolProvider(ABC):
    @abstractmethod
    async def probe(self, path: str) -> MediaProbe:
        """Inspect a media file.

        Raises:
            ProviderError: if the inspection tool fails or cannot be run.
        """
        raise NotImplementedError

    @abstractmethod
    async def extract_audio(self, input_path: str, output_path: str, *, timeout_s: float) -> str:
        """Write the audio track of `input_path` to `output_path`.

        Raises:
            ProviderError: EXTRACTION_TIMEOUT if the tool was killed after `timeout_s`,
                EXTRACTION_FAILED if it exited non-zero or produced no output file.
        """
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover
        return None
