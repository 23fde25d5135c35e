"""vidsum exception hierarchy."""

from __future__ import annotations

from vidsum.error_codes import NON_RETRYABLE, ErrorCode


class VidsumError(Exception):
    """Base error for vidsum."""


class ConfigurationError(VidsumError):
    """Raised when configuration or inputs are invalid."""


class ProviderError(VidsumError):
    """Raised when an external tool or service call fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        error_code: ErrorCode | None = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.error_code = error_code


class TransitionError(VidsumError):
    """Raised when a pipeline transition is rejected or fails."""

    def __init__(
        self,
        transition: str,
        message: str,
        *,
        error_code: ErrorCode,
        video_id: str | None = None,
    ) -> None:
        prefix = f"{transition}"
        if video_id:
            prefix = f"{prefix} (video_id={video_id})"
        super().__init__(f"{prefix}: {message}")
        self.transition = transition
        self.video_id = video_id
        self.message = message
        self.error_code = error_code

    @property
    def retryable(self) -> bool:
        return self.error_code not in NON_RETRYABLE

    def to_dict(self) -> dict[str, object]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "transition": self.transition,
            "video_id": self.video_id,
            "retryable": self.retryable,
        }


class UploadRejectedError(VidsumError):
    """Raised by the upload gate when a payload must not enter the pipeline."""

    def __init__(
        self,
        message: str,
        *,
        error_code: ErrorCode = ErrorCode.INVALID_MEDIA,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
