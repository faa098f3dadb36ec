"""Ordered collection of per-item results with console echo."""

from __future__ import annotations

from .errors import DigestError
from .models import EMAIL, CandidateItem, RunReport, SummaryResult


def render_console_block(result: SummaryResult) -> str:
    """Human-readable block printed as each item finishes."""

    if result.kind == EMAIL:
        heading = f"=== Email: {result.title} ==="
        origin_line = f"From: {result.origin}"
    else:
        heading = f"=== PR #{result.identifier}: {result.title} ==="
        origin_line = f"Repository: {result.origin}"

    if result.error is not None:
        body = ["", f"Failed ({result.error['kind']}, {result.error['phase']}):", result.error["message"]]
    else:
        body = ["", "Summary:", result.summary or ""]

    return "\n".join(["", heading, origin_line, f"URL: {result.locator}", *body, "", "---"])


class RunAggregator:
    """Accumulate Summary Results in processing order."""

    def __init__(self, echo: bool = True):
        self.echo = echo
        self._results: list[SummaryResult] = []

    def add(self, result: SummaryResult) -> None:
        self._results.append(result)
        if self.echo:
            print(render_console_block(result))

    def add_failure(self, candidate: CandidateItem, error: DigestError) -> None:
        self.add(SummaryResult.from_candidate(candidate, summary=None, error=error.to_dict()))

    def report(self) -> RunReport:
        return RunReport(results=list(self._results))
