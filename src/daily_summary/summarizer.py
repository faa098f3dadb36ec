"""Per-item summarization on top of the chat completion client."""

from __future__ import annotations

from typing import Callable

from .errors import DigestError
from .llm import ChatCompletionClient
from .models import CandidateItem
from .prompts import build_prompt


class ItemSummarizer:
    """Turn one candidate and its detail payload into summary text."""

    def __init__(
        self,
        model_name: str,
        system_prompt: str,
        max_tokens: int,
        llm_client: ChatCompletionClient | None = None,
        prompt_builder: Callable[[CandidateItem, str], str] = build_prompt,
    ):
        self.model_name = model_name
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.llm_client = llm_client or ChatCompletionClient()
        self.prompt_builder = prompt_builder

    def summarize(self, candidate: CandidateItem, detail: str) -> str:
        user_prompt = self.prompt_builder(candidate, detail)
        try:
            return self.llm_client.complete(
                model=self.model_name,
                system_prompt=self.system_prompt,
                user_prompt=user_prompt,
                max_tokens=self.max_tokens,
            )
        except DigestError as exc:
            exc.attach(candidate.identifier, candidate.origin)
            raise
