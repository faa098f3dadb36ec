"""Core data models for the fetch-and-summarize pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

PULL_REQUEST = "pull_request"
EMAIL = "email"


@dataclass(frozen=True, slots=True)
class CandidateItem:
    """A listed remote item, before its detail payload is fetched."""

    kind: str
    identifier: str | int
    title: str
    origin: str
    locator: str
    created_at: datetime | None = None
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SummaryResult:
    """Summary output for one candidate."""

    identifier: str | int
    title: str
    origin: str
    locator: str
    summary: str | None
    kind: str = PULL_REQUEST
    error: dict[str, Any] | None = None

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateItem,
        summary: str | None,
        error: dict[str, Any] | None = None,
    ) -> "SummaryResult":
        return cls(
            identifier=candidate.identifier,
            title=candidate.title,
            origin=candidate.origin,
            locator=candidate.locator,
            summary=summary,
            kind=candidate.kind,
            error=error,
        )

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_record(self) -> dict[str, Any]:
        record = {
            "identifier": self.identifier,
            "title": self.title,
            "origin": self.origin,
            "locator": self.locator,
            "summary": self.summary,
        }
        if self.error is not None:
            record["error"] = self.error
        return record


@dataclass(slots=True)
class RunReport:
    """Ordered Summary Results produced by one run."""

    results: list[SummaryResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[SummaryResult]:
        return iter(self.results)

    @property
    def failures(self) -> list[SummaryResult]:
        return [item for item in self.results if item.failed]

    def to_records(self) -> list[dict[str, Any]]:
        return [item.to_record() for item in self.results]

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_records(), ensure_ascii=False, indent=indent)
