from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import openai
from openai import OpenAI

from tubequiz.core.config import Settings
from tubequiz.core.errors import PayloadTooLarge, QuotaExceeded, TranscriptionError, TranscriptionTimeout
from tubequiz.services.llm.openai_client import build_openai_client

logger = logging.getLogger(__name__)

MAX_AUDIO_BYTES = 25 * 1024 * 1024


@dataclass
class STTResult:
    text: str
    word_count: int


def count_words(text: str) -> int:
    return len((text or "").strip().split())


class OpenAITranscriber:
    """
    Whisper transcription over the OpenAI audio API.

    The size check runs before any network call; the request timeout bounds
    the whole upload + transcription wait.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str = "whisper-1",
        *,
        language: str | None = "en",
        max_bytes: int = MAX_AUDIO_BYTES,
        timeout_sec: float = 300.0,
    ) -> None:
        self.client = client
        self.model = model
        self.language = language
        self.max_bytes = max_bytes
        self.timeout_sec = timeout_sec

    @classmethod
    def from_settings(cls, s: Settings) -> "OpenAITranscriber":
        return cls(
            build_openai_client(s.openai_api_key, timeout_sec=s.transcribe_timeout_sec),
            s.transcribe_model,
            language=s.transcribe_language,
            max_bytes=s.transcribe_max_bytes,
            timeout_sec=s.transcribe_timeout_sec,
        )

    def _check_size(self, audio_path: Path) -> int:
        if not audio_path.exists():
            raise TranscriptionError(f"Audio file not found: {audio_path}")
        size = audio_path.stat().st_size
        logger.info("Audio file size: %d bytes (%.2fMB)", size, size / (1024 * 1024))
        if size > self.max_bytes:
            raise PayloadTooLarge(
                f"Audio file too large ({size / (1024 * 1024):.2f}MB). "
                f"Must be under {self.max_bytes / (1024 * 1024):.0f}MB"
            )
        return size

    def transcribe(self, audio_path: Path) -> STTResult:
        audio_path = Path(audio_path)
        self._check_size(audio_path)

        kwargs = {"model": self.model, "timeout": self.timeout_sec}
        if self.language:
            kwargs["language"] = self.language

        logger.info("Sending audio to OpenAI for transcription (model=%s)", self.model)
        try:
            with open(audio_path, "rb") as f:
                result = self.client.audio.transcriptions.create(file=(audio_path.name, f), **kwargs)
        except openai.APITimeoutError:
            raise TranscriptionTimeout(f"Transcription timed out after {self.timeout_sec / 60:g} minutes")
        except openai.APIStatusError as e:
            if getattr(e, "code", None) == "insufficient_quota":
                raise QuotaExceeded(
                    "OpenAI API quota exceeded. Please check your billing details or try again later."
                )
            raise TranscriptionError(f"OpenAI API error ({e.status_code}): {e.message}")
        except openai.APIError as e:
            raise TranscriptionError(f"OpenAI API error: {e}")

        text = (getattr(result, "text", None) or "").strip()
        word_count = count_words(text)
        logger.info("Transcription finished: %d words", word_count)
        return STTResult(text=text, word_count=word_count)
