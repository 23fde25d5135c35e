"""Local filesystem staging area for in-flight media artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_VIDEO_DIR = "videos"
_AUDIO_DIR = "audio"


@dataclass(frozen=True)
class StagedFile:
    video_id: str
    kind: str  # "video" | "audio"
    path: str
    modified_at: float = 0.0


def _safe_part(value: str) -> str:
    return str(value or "").strip().replace("/", "_").replace("\\", "_").replace("\x00", "")


class StagingArea:
    """Holds raw videos and extracted audio, one file per kind per video id."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir)

    def video_path(self, video_id: str, extension: str) -> str:
        ext = _safe_part(extension).lower()
        if ext and not ext.startswith("."):
            ext = f".{ext}"
        return str(self.base_dir / _VIDEO_DIR / f"{_safe_part(video_id)}{ext}")

    def audio_path(self, video_id: str, extension: str = ".wav") -> str:
        ext = _safe_part(extension).lower()
        if ext and not ext.startswith("."):
            ext = f".{ext}"
        return str(self.base_dir / _AUDIO_DIR / f"{_safe_part(video_id)}{ext}")

    async def exists(self, path: str | None) -> bool:
        if not path:
            return False
        return Path(path).is_file()

    async def size(self, path: str) -> int:
        return int(Path(path).stat().st_size)

    async def read(self, path: str) -> bytes:
        return Path(path).read_bytes()

    async def write(self, path: str, data: bytes) -> str:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        return str(p)

    async def delete(self, path: str | None) -> bool:
        """Delete a staged file. A file that is already gone counts as deleted.

        Returns True if a file was removed, False if there was nothing to remove.
        Other OS errors propagate to the caller.
        """
        if not path:
            return False
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        return True

    async def list_staged(self) -> list[StagedFile]:
        out: list[StagedFile] = []
        for kind, dirname in (("video", _VIDEO_DIR), ("audio", _AUDIO_DIR)):
            base = self.base_dir / dirname
            if not base.exists():
                continue
            for p in sorted(base.iterdir()):
                if not p.is_file():
                    continue
                video_id = p.name.split(".", 1)[0]
                out.append(
                    StagedFile(
                        video_id=video_id,
                        kind=kind,
                        path=str(p),
                        modified_at=p.stat().st_mtime,
                    )
                )
        return out
