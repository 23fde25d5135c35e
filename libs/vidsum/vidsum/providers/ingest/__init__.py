from vidsum.providers.ingest.base import IngestionProvider, RemoteMetadata

__all__ = ["IngestionProvider", "RemoteMetadata"]
