"""Prompt builders for pull request and email summaries."""

from __future__ import annotations

from .models import EMAIL, CandidateItem

PULL_REQUEST_SYSTEM_PROMPT = (
    "You are a helpful code reviewer. Summarize the key changes in this PR concisely."
)
EMAIL_SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes emails. "
    "Capture the key points and any action items concisely."
)


def build_pull_request_prompt(candidate: CandidateItem, diff: str) -> str:
    return f"PR Title: {candidate.title}\nDescription: {candidate.description}\nDiff:\n{diff}"


def build_email_prompt(candidate: CandidateItem, body: str) -> str:
    return (
        "Summarize the following email.\n\n"
        f"From: {candidate.origin}\n"
        f"Subject: {candidate.title}\n"
        f"Date: {candidate.metadata.get('date', '')}\n\n"
        f"{body}"
    )


def build_prompt(candidate: CandidateItem, detail: str) -> str:
    """Dispatch on item kind."""

    if candidate.kind == EMAIL:
        return build_email_prompt(candidate, detail)
    return build_pull_request_prompt(candidate, detail)
