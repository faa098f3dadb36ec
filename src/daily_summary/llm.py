"""Minimal OpenAI-compatible chat completion client."""

from __future__ import annotations

import os

from .errors import SummarizationError
from .transport import build_request, read_json

OPENAI_BASE_URL = "https://api.openai.com/v1"


class ChatCompletionClient:
    """HTTP client for chat completion."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: int = 60):
        self.api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY", "")
        self.base_url = (base_url or os.getenv("OPENAI_BASE_URL") or OPENAI_BASE_URL).rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def complete(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
    ) -> str:
        """Send one chat completion request and return the first choice's text.

        Raises:
            AuthenticationError: If the provider rejects the API key.
            SummarizationError: On any other provider failure or an empty completion.
        """

        if not self.api_key:
            raise SummarizationError("OPENAI_API_KEY is not set", phase="summarize")

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
        }
        request = build_request(
            self.endpoint,
            headers={"Authorization": f"Bearer {self.api_key}"},
            payload=payload,
        )
        body = read_json(
            request,
            timeout=self.timeout,
            error_cls=SummarizationError,
            phase="summarize",
        )

        choices = body.get("choices") if isinstance(body, dict) else None
        first = choices[0] if isinstance(choices, list) and choices else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            raise SummarizationError("Completion response contained no text", phase="summarize")
        return str(content)
