"""Pipeline orchestration.

Keep imports lazy: the factory pulls in every provider SDK.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vidsum.pipeline.factory import create_video_pipeline
    from vidsum.pipeline.locks import KeyedLock
    from vidsum.pipeline.orchestrator import VideoPipeline
    from vidsum.pipeline.reclaim import reclaim_staged_files

__all__ = ["KeyedLock", "VideoPipeline", "create_video_pipeline", "reclaim_staged_files"]


def __getattr__(name: str) -> Any:
    if name == "KeyedLock":
        from vidsum.pipeline.locks import KeyedLock

        return KeyedLock
    if name == "VideoPipeline":
        from vidsum.pipeline.orchestrator import VideoPipeline

        return VideoPipeline
    if name == "reclaim_staged_files":
        from vidsum.pipeline.reclaim import reclaim_staged_files

        return reclaim_staged_files
    if name == "create_video_pipeline":
        from vidsum.pipeline.factory import create_video_pipeline

        return create_video_pipeline
    raise AttributeError(name)
