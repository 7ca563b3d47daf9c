from __future__ import annotations

import logging
from typing import Protocol

import httpx
from openai import OpenAI

from tubequiz.core.config import Settings

logger = logging.getLogger(__name__)


def build_openai_client(api_key: str | None, *, timeout_sec: float) -> OpenAI:
    """
    SDK retries are disabled: the pipeline never retries provider calls.
    """
    if not api_key:
        raise ValueError("OPENAI_API_KEY is missing")
    return OpenAI(api_key=api_key, timeout=httpx.Timeout(timeout_sec), max_retries=0)


class ChatClient(Protocol):
    def complete(self, system: str, prompt: str) -> str: ...


class OpenAIChatClient:
    """
    One chat-completion call per prompt; returns the raw assistant text.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str = "gpt-3.5-turbo",
        *,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, s: Settings) -> "OpenAIChatClient":
        return cls(
            build_openai_client(s.openai_api_key, timeout_sec=s.openai_timeout_sec),
            s.question_model,
            temperature=s.question_temperature,
            max_tokens=s.question_max_tokens,
        )

    def complete(self, system: str, prompt: str) -> str:
        logger.debug("Sending chat completion (model=%s, prompt_chars=%d)", self.model, len(prompt))
        chat = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        if not chat.choices:
            return ""
        return (chat.choices[0].message.content or "").strip()
