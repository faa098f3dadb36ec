"""Protocol interfaces for pipeline dependency typing."""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from .models import CandidateItem, RunReport


class SourceInterface(Protocol):
    """Candidate source interface."""

    def search_recent(self, now: datetime | None = None) -> list[CandidateItem]: ...


class DetailFetcherInterface(Protocol):
    """Detail payload fetcher interface."""

    def fetch_detail(self, candidate: CandidateItem) -> str: ...


class SummarizerInterface(Protocol):
    """Per-item summarizer interface."""

    def summarize(self, candidate: CandidateItem, detail: str) -> str: ...


class RendererInterface(Protocol):
    """Renderer interface for digest generation."""

    def render(self, run_date: date, report: RunReport) -> str: ...
