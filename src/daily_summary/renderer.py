"""Markdown rendering for run reports."""

from __future__ import annotations

from datetime import date

from .models import EMAIL, RunReport

REPORT_TITLES = {
    "prs": "Pull Request Summary",
    "emails": "Email Summary",
}


def render_markdown_digest(run_date: date, report: RunReport, title: str = "Pull Request Summary") -> str:
    """Render a run report to a markdown digest."""

    header = f"# {title} - {run_date.strftime('%m%d')}, {run_date.year}"
    blocks = [header, ""]

    if not len(report):
        blocks.append("No items found for this run.")

    for index, result in enumerate(report, start=1):
        if result.kind == EMAIL:
            heading = f"## {index}. [{result.title or '(no subject)'}]({result.locator})"
            origin = f"- **From**: {result.origin}"
        else:
            heading = f"## {index}. [PR #{result.identifier}: {result.title}]({result.locator})"
            origin = f"- **Repository**: {result.origin}"

        blocks.extend([heading, "", origin, ""])
        if result.error is not None:
            blocks.extend(["### Failed", f"{result.error['kind']} ({result.error['phase']}): {result.error['message']}", ""])
        else:
            blocks.extend(["### Summary", result.summary or "", ""])

    return "\n".join(blocks).strip() + "\n"


class MarkdownRenderer:
    """Object adapter for pipeline dependency injection."""

    def __init__(self, title: str = "Pull Request Summary"):
        self.title = title

    def render(self, run_date: date, report: RunReport) -> str:
        return render_markdown_digest(run_date=run_date, report=report, title=self.title)
