"""Inference provider base class."""

from abc import ABC, abstractmethod

TRANSCRIPTION_PROMPT = "Transcribe the following audio into clear and accurate text:"

SUMMARY_PROMPT_TEMPLATE = """
You are an expert video summarizer. Given the transcript below,
create both a **short summary (2-3 sentences)** and a **detailed summary (5 bullet points)**.

Transcript:
{transcript}

Format your response as:

Short Summary:
[summary here]

Detailed Summary:
1. ...
2. ...
3. ...
4. ...
5. ...
"""


def build_summary_prompt(transcript: str) -> str:
    return SUMMARY_PROMPT_TEMPLATE.format(transcript=str(transcript or "").strip())


class InferenceProvider(ABC):
    """Abstract base class for remote speech-to-text and summarization services.

    Implementations surface every service-side failure (quota, malformed input,
    timeout, empty response) as `ProviderError(error_code=ErrorCode.INFERENCE_FAILED)`.
    """

    provider: str = "inference"
    model: str = ""

    @abstractmethod
    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        """Transcribe an audio payload.

        Args:
            audio: Raw audio bytes.
            mime_type: Content type of `audio` (e.g. "audio/wav").

        Returns:
            Transcript text.
        """
        ...

    @abstractmethod
    async def summarize(self, transcript: str) -> str:
        """Summarize a transcript.

        Returns:
            The model's raw text, unparsed.
        """
        ...

    async def close(self) -> None:
        """Close any underlying resources (optional)."""
        return None
