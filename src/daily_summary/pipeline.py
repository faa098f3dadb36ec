"""Pipeline orchestration for one fetch-and-summarize run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from .aggregator import RunAggregator
from .errors import AuthenticationError, DigestError
from .interfaces import DetailFetcherInterface, SourceInterface, SummarizerInterface
from .models import RunReport, SummaryResult


@dataclass(slots=True)
class SummaryPipeline:
    """Coordinate candidate listing, detail fetching, and summarization.

    Items are processed one at a time in source order. With ``fail_fast`` the
    first error ends the run; otherwise fetch and summarization failures are
    recorded on the item and the run continues. Rejected credentials always
    end the run.
    """

    source: SourceInterface
    fetcher: DetailFetcherInterface
    summarizer: SummarizerInterface
    max_items: int
    fail_fast: bool = True
    echo: bool = True
    empty_message: str = "No items found."

    def run(self, now: datetime | None = None) -> RunReport:
        """Run the pipeline once and return the ordered report."""

        now_utc = now.astimezone(timezone.utc) if now else datetime.now(timezone.utc)
        aggregator = RunAggregator(echo=self.echo)

        candidates = self.source.search_recent(now=now_utc)[: self.max_items]
        print(f"[STEP] Candidates fetched: {len(candidates)}")
        if not candidates:
            print(self.empty_message)
            return aggregator.report()

        for index, candidate in enumerate(candidates, start=1):
            print(f"[STEP] Processing item {index}/{len(candidates)}: {candidate.identifier}")
            try:
                detail = self.fetcher.fetch_detail(candidate)
                summary = self.summarizer.summarize(candidate, detail)
            except AuthenticationError as exc:
                exc.attach(candidate.identifier, candidate.origin)
                raise
            except DigestError as exc:
                exc.attach(candidate.identifier, candidate.origin)
                if self.fail_fast:
                    raise
                print(f"[STEP] Item failed: {candidate.identifier}: {exc}")
                aggregator.add_failure(candidate, exc)
                continue

            aggregator.add(SummaryResult.from_candidate(candidate, summary))

        return aggregator.report()
