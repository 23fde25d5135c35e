"""Google Gemini inference provider (google-generativeai SDK)."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any

import google.generativeai as genai

from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError
from vidsum.providers.inference.base import (
    TRANSCRIPTION_PROMPT,
    InferenceProvider,
    build_summary_prompt,
)

logger = logging.getLogger(__name__)

# genai.configure() mutates module-level SDK state.
_GENAI_LOCK = threading.Lock()

# Extra wait on top of the SDK request timeout before the caller gives up.
_TIMEOUT_GRACE_S = 5.0


def _coerce_usage(value: Any) -> int | None:
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _usage_counts(response: object) -> tuple[int | None, int | None]:
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return None, None
    return (
        _coerce_usage(getattr(usage, "prompt_token_count", None)),
        _coerce_usage(getattr(usage, "candidates_token_count", None)),
    )


def _response_text(response: object) -> str:
    try:
        text = str(getattr(response, "text", "") or "")
    except ValueError:
        # `.text` raises when the candidate was blocked or has no parts.
        text = ""
    if text.strip():
        return text
    candidates = getattr(response, "candidates", None)
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None)
        if parts:
            return str(getattr(parts[0], "text", "") or "")
    return ""


class GeminiProvider(InferenceProvider):
    """Google Gemini API provider (Google AI Studio / compatible endpoints).

    The SDK client is configured once at construction and reused for the
    process lifetime.
    """

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str | None = None,
        timeout_s: float = 120.0,
    ) -> None:
        self.api_key = str(api_key or "")
        self.model = str(model or "").strip()
        self.base_url = str(base_url or "").strip() or None
        self.timeout_s = float(timeout_s)
        if not self.api_key:
            raise ValueError("GeminiProvider requires api_key")
        if not self.model:
            raise ValueError("GeminiProvider requires model")

        kwargs: dict[str, Any] = {"api_key": self.api_key}
        if self.base_url:
            kwargs["client_options"] = {"api_endpoint": self.base_url}
        with _GENAI_LOCK:
            genai.configure(**kwargs)
        self._model = genai.GenerativeModel(model_name=self.model)

    def _generate_sync(self, contents: list[Any]) -> object:
        return self._model.generate_content(
            contents,
            request_options={"timeout": self.timeout_s},
        )

    async def _generate(self, contents: list[Any], *, op: str) -> str:
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self._generate_sync, contents),
                timeout=self.timeout_s + _TIMEOUT_GRACE_S,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("inference request timed out (op=%s, model=%s)", op, self.model)
            raise ProviderError(
                self.provider,
                f"{op} timed out after {self.timeout_s:g}s",
                error_code=ErrorCode.INFERENCE_FAILED,
            ) from exc
        except Exception as exc:
            logger.warning("inference request failed (op=%s, model=%s): %s", op, self.model, exc)
            raise ProviderError(
                self.provider, str(exc), error_code=ErrorCode.INFERENCE_FAILED
            ) from exc

        latency_ms = int((time.perf_counter() - started) * 1000)
        prompt_tokens, completion_tokens = _usage_counts(response)
        logger.info(
            "inference call (provider=%s, model=%s, op=%s, latency_ms=%s, prompt_tokens=%s, completion_tokens=%s)",
            self.provider,
            self.model,
            op,
            latency_ms,
            prompt_tokens,
            completion_tokens,
        )

        text = _response_text(response)
        if not text.strip():
            raise ProviderError(
                self.provider, f"empty {op} response", error_code=ErrorCode.INFERENCE_FAILED
            )
        return text

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        contents = [
            TRANSCRIPTION_PROMPT,
            {"mime_type": str(mime_type or "audio/wav"), "data": bytes(audio)},
        ]
        return await self._generate(contents, op="transcribe")

    async def summarize(self, transcript: str) -> str:
        return await self._generate([build_summary_prompt(transcript)], op="summarize")
