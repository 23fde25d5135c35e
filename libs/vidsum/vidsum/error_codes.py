"""Canonical error codes surfaced to API callers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    PREREQUISITE_MISSING = "PREREQUISITE_MISSING"

    SOURCE_MISSING = "SOURCE_MISSING"
    AUDIO_MISSING = "AUDIO_MISSING"

    NO_AUDIO_STREAM = "NO_AUDIO_STREAM"
    UNSUPPORTED_CONTAINER = "UNSUPPORTED_CONTAINER"
    INVALID_SOURCE = "INVALID_SOURCE"
    INVALID_MEDIA = "INVALID_MEDIA"

    EXTRACTION_TIMEOUT = "EXTRACTION_TIMEOUT"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    INFERENCE_FAILED = "INFERENCE_FAILED"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"


# Failures caused by the input itself; retrying without different input cannot succeed.
NON_RETRYABLE: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.NO_AUDIO_STREAM,
        ErrorCode.UNSUPPORTED_CONTAINER,
        ErrorCode.INVALID_SOURCE,
        ErrorCode.INVALID_MEDIA,
        ErrorCode.PAYLOAD_TOO_LARGE,
    }
)
