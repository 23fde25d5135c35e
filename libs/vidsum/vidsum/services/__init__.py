"""Reusable services (record store, upload gate)."""

from vidsum.services.video_service import VideoService
from vidsum.services.video_store import VideoStore

__all__ = ["VideoService", "VideoStore"]
