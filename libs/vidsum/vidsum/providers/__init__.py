"""Provider abstractions for external tools and services."""

from vidsum.providers.registry import (
    get_inference_provider,
    get_ingestion_provider,
    get_media_tool,
)

__all__ = ["get_inference_provider", "get_ingestion_provider", "get_media_tool"]
