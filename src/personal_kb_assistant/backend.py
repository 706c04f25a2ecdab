from __future__ import annotations

import logging
from typing import Protocol

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a careful assistant for question answering over a personal knowledge base."


class GenerationError(RuntimeError):
    """The generative backend could not produce text (quota, timeout, network, empty reply)."""


class GenerativeBackend(Protocol):
    def generate(self, prompt: str) -> str:
        ...


class OpenAIBackend:
    def __init__(
        self,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        max_retries: int = 1,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self._client = client
        self._timeout = timeout
        self._max_retries = max_retries

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            try:
                self._client = OpenAI(timeout=self._timeout, max_retries=self._max_retries)
            except OpenAIError as exc:
                # Raised when OPENAI_API_KEY is not set.
                raise GenerationError(str(exc)) from exc
        return self._client

    def generate(self, prompt: str) -> str:
        logger.debug("Calling OpenAI model %s (%d prompt chars)", self.model, len(prompt))
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.2,
            )
        except OpenAIError as exc:
            raise GenerationError(f"OpenAI request failed: {exc}") from exc

        answer = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not answer:
            raise GenerationError("OpenAI returned an empty response")
        return answer


__all__ = ["GenerationError", "GenerativeBackend", "OpenAIBackend"]
