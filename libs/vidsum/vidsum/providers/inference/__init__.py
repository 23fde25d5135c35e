"""Inference provider implementations."""

from vidsum.providers.inference.base import (
    SUMMARY_PROMPT_TEMPLATE,
    TRANSCRIPTION_PROMPT,
    InferenceProvider,
    build_summary_prompt,
)

__all__ = [
    "InferenceProvider",
    "SUMMARY_PROMPT_TEMPLATE",
    "TRANSCRIPTION_PROMPT",
    "build_summary_prompt",
]
