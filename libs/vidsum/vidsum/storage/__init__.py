"""Artifact staging backends."""

from vidsum.config import Settings
from vidsum.storage.staging import StagedFile, StagingArea


def get_staging_area(settings: Settings) -> StagingArea:
    return StagingArea(str(settings.data_dir))


__all__ = ["StagedFile", "StagingArea", "get_staging_area"]
