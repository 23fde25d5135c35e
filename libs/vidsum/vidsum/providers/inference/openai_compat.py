"""OpenAI-compatible inference provider (Whisper-style transcription + chat summary)."""

from __future__ import annotations

import logging
import mimetypes
import time
from typing import Any

import httpx

from vidsum.error_codes import ErrorCode
from vidsum.exceptions import ProviderError
from vidsum.providers.inference.base import InferenceProvider, build_summary_prompt

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"


def _format_http_error(response: httpx.Response) -> str:
    status = response.status_code
    reason = response.reason_phrase
    detail = ""
    try:
        detail = response.text.strip()
    except Exception:
        detail = ""
    if detail:
        if len(detail) > 2000:
            detail = detail[:2000] + "…"
        return f"HTTP {status} {reason}: {detail}"
    return f"HTTP {status} {reason}"


def _audio_filename(mime_type: str) -> str:
    ext = mimetypes.guess_extension(str(mime_type or "").split(";", 1)[0].strip()) or ".wav"
    return f"audio{ext}"


class OpenAICompatProvider(InferenceProvider):
    """OpenAI-compatible API provider (works with OpenAI, vLLM, etc.)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        transcription_model: str | None = None,
        timeout_s: float = 120.0,
        provider: str = "openai",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.provider = provider
        resolved = str(base_url or "").strip()
        self.base_url = (resolved or DEFAULT_OPENAI_BASE_URL).rstrip("/")
        self.api_key = api_key
        self.model = model
        self.transcription_model = str(transcription_model or "").strip() or DEFAULT_TRANSCRIPTION_MODEL
        self.timeout_s = float(timeout_s)
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_s), transport=transport)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, path: str, *, op: str, **kwargs: Any) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            response = await self._client.post(
                f"{self.base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.TimeoutException as exc:
            raise ProviderError(
                self.provider,
                f"{op} timed out after {self.timeout_s:g}s",
                error_code=ErrorCode.INFERENCE_FAILED,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(self.provider, str(exc), error_code=ErrorCode.INFERENCE_FAILED) from exc

        if response.status_code >= 400:
            raise ProviderError(
                self.provider, _format_http_error(response), error_code=ErrorCode.INFERENCE_FAILED
            )
        try:
            result = response.json()
        except ValueError as exc:
            raise ProviderError(
                self.provider, f"invalid JSON response: {exc}", error_code=ErrorCode.INFERENCE_FAILED
            ) from exc
        if not isinstance(result, dict):
            raise ProviderError(
                self.provider,
                f"expected JSON object, got {type(result).__name__}",
                error_code=ErrorCode.INFERENCE_FAILED,
            )

        logger.info(
            "inference call (provider=%s, model=%s, op=%s, latency_ms=%s)",
            self.provider,
            self.transcription_model if op == "transcribe" else self.model,
            op,
            int((time.perf_counter() - started) * 1000),
        )
        return result

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        mime = str(mime_type or "audio/wav")
        result = await self._post(
            "/audio/transcriptions",
            op="transcribe",
            files={"file": (_audio_filename(mime), bytes(audio), mime)},
            data={"model": self.transcription_model, "response_format": "json"},
        )
        text = str(result.get("text") or "")
        if not text.strip():
            raise ProviderError(
                self.provider, "empty transcribe response", error_code=ErrorCode.INFERENCE_FAILED
            )
        return text

    async def summarize(self, transcript: str) -> str:
        result = await self._post(
            "/chat/completions",
            op="summarize",
            json={
                "model": self.model,
                "messages": [{"role": "user", "content": build_summary_prompt(transcript)}],
            },
        )
        text = ""
        choices = result.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            if isinstance(message, dict):
                text = str(message.get("content") or "")
        if not text.strip():
            raise ProviderError(
                self.provider, "empty summarize response", error_code=ErrorCode.INFERENCE_FAILED
            )
        return text

    async def close(self) -> None:
        await self._client.aclose()
