import pytest

from daily_summary.errors import SummarizationError
from daily_summary.models import PULL_REQUEST, CandidateItem
from daily_summary.summarizer import ItemSummarizer


class FakeClient:
    def __init__(self, reply="A short summary.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete(self, model, system_prompt, user_prompt, max_tokens):
        self.calls.append(
            {"model": model, "system_prompt": system_prompt, "user_prompt": user_prompt, "max_tokens": max_tokens}
        )
        if self.error is not None:
            raise self.error
        return self.reply


def make_candidate() -> CandidateItem:
    return CandidateItem(
        kind=PULL_REQUEST,
        identifier=5,
        title="Fix flaky test",
        origin="acme/widgets",
        locator="https://github.com/acme/widgets/pull/5",
        description="Retry the socket bind.",
    )


def test_summarize_sends_prompt_with_configured_budget() -> None:
    client = FakeClient()
    summarizer = ItemSummarizer(
        model_name="gpt-4o-mini",
        system_prompt="You are a helpful code reviewer.",
        max_tokens=500,
        llm_client=client,
    )

    assert summarizer.summarize(make_candidate(), "diff text") == "A short summary."
    call = client.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["system_prompt"] == "You are a helpful code reviewer."
    assert call["max_tokens"] == 500
    assert call["user_prompt"].startswith("PR Title: Fix flaky test\n")
    assert call["user_prompt"].endswith("Diff:\ndiff text")


def test_summarize_attaches_item_context_to_errors() -> None:
    client = FakeClient(error=SummarizationError("HTTP 500: upstream", phase="summarize"))
    summarizer = ItemSummarizer(model_name="gpt-4", system_prompt="s", max_tokens=500, llm_client=client)

    with pytest.raises(SummarizationError) as excinfo:
        summarizer.summarize(make_candidate(), "diff")

    assert excinfo.value.item_id == 5
    assert excinfo.value.origin == "acme/widgets"
    assert excinfo.value.to_dict() == {
        "kind": "summarization",
        "phase": "summarize",
        "message": "HTTP 500: upstream",
    }
