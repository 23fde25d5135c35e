from vidsum.providers.media.base import MediaProbe, MediaToolProvider

__all__ = ["MediaProbe", "MediaToolProvider"]
