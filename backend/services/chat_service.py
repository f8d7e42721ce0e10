"""
Chat service — asks an OpenAI-compatible chat completion endpoint for recipe steps.
Blocking (requests); the turn controller runs it off the event loop.
"""

from __future__ import annotations

import logging

import requests

from ..config import (
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    OPENAI_TEMPERATURE,
    CHAT_TIMEOUT_S,
    SYSTEM_PROMPT,
    USER_PROMPT,
)

logger = logging.getLogger(__name__)


class ChatCompletionError(RuntimeError):
    """The chat API could not be reached or returned an unusable reply."""


class ChatService:
    """
    Thin client for POST {base_url}/chat/completions.

    Body:  {"model", "messages": [{"role", "content"}], "temperature"}
    Reply: choices[0].message.content (the only thing handed to the step parser)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key if api_key is not None else OPENAI_API_KEY
        self.base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self.model = model or OPENAI_MODEL
        self.temperature = OPENAI_TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or CHAT_TIMEOUT_S
        self._http = session or requests.Session()

        if not self.api_key:
            logger.warning("OPENAI_API_KEY not set. Recipe queries will fail.")

    def build_messages(self, query: str, language: str) -> list[dict]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT.format(language=language)},
            {"role": "user", "content": USER_PROMPT.format(query=query, language=language)},
        ]

    def complete(self, query: str, language: str = "English") -> str:
        """Return the assistant's reply text. Raises ChatCompletionError."""
        if not self.api_key:
            raise ChatCompletionError("OPENAI_API_KEY is not configured")

        payload = {
            "model": self.model,
            "messages": self.build_messages(query, language),
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = self._http.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ChatCompletionError(f"Chat request failed: {e}") from e

        if resp.status_code != 200:
            raise ChatCompletionError(f"Chat API error {resp.status_code}: {resp.text[:200]}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ChatCompletionError(f"Malformed chat reply: {e}") from e

        if not isinstance(content, str):
            raise ChatCompletionError("Chat reply has no text content")

        logger.info(f"Chat reply for '{query}': {len(content)} chars")
        return content
