"""Core data models for vidsum."""

from vidsum.models.video import (
    TransitionResult,
    VideoRecord,
    VideoStage,
    new_video_id,
)

__all__ = ["TransitionResult", "VideoRecord", "VideoStage", "new_video_id"]
