"""Output adapters: JSON report, markdown digest, PDF digest, and Actions output."""

from __future__ import annotations

import html
import os
import uuid
from datetime import date
from pathlib import Path
from typing import Mapping

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Preformatted, SimpleDocTemplate, Spacer

from .interfaces import RendererInterface
from .models import EMAIL, RunReport
from .renderer import MarkdownRenderer


def write_report_json(report: RunReport, path: str | Path) -> str:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report.to_json(indent=2) + "\n", encoding="utf-8")
    return str(output_path)


def write_action_output(name: str, value: str, environ: Mapping[str, str] | None = None) -> bool:
    """Append a step output to ``$GITHUB_OUTPUT``; returns False outside Actions."""

    env = os.environ if environ is None else environ
    output_file = env.get("GITHUB_OUTPUT", "")
    if not output_file:
        return False

    delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
    with open(output_file, "a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


class DigestWriter:
    """Write the digest as markdown and, optionally, a mirrored PDF."""

    def __init__(
        self,
        output_dir: str | Path,
        stem_suffix: str = "prs",
        title: str = "Pull Request Summary",
        output_pdf: bool = False,
        renderer: RendererInterface | None = None,
    ):
        self.output_dir = Path(output_dir)
        self.stem_suffix = stem_suffix
        self.title = title
        self.output_pdf = output_pdf
        self.renderer = renderer or MarkdownRenderer(title=title)

    def write(self, run_date: date, report: RunReport) -> str:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{run_date.strftime('%m%d')}_{self.stem_suffix}"
        markdown_path = self.output_dir / f"{stem}.md"

        markdown_path.write_text(self.renderer.render(run_date=run_date, report=report), encoding="utf-8")
        if self.output_pdf:
            self._write_pdf(run_date=run_date, report=report, output_path=self.output_dir / f"{stem}.pdf")
        return str(markdown_path)

    def _write_pdf(self, run_date: date, report: RunReport, output_path: Path) -> None:
        doc = SimpleDocTemplate(
            str(output_path),
            pagesize=A4,
            leftMargin=18 * mm,
            rightMargin=18 * mm,
            topMargin=16 * mm,
            bottomMargin=18 * mm,
            title=self.title,
        )
        doc.build(
            _build_story(run_date, report, self.title),
            onFirstPage=_draw_footer,
            onLaterPages=_draw_footer,
        )


def _draw_footer(canvas, doc) -> None:  # type: ignore[no-untyped-def]
    canvas.saveState()
    canvas.setFont("Helvetica", 9)
    canvas.setFillColor(colors.grey)
    canvas.drawRightString(A4[0] - 18 * mm, 10 * mm, f"Page {canvas.getPageNumber()}")
    canvas.restoreState()


def _build_story(run_date: date, report: RunReport, title: str):
    styles = _build_styles()
    story = [
        Paragraph(html.escape(f"{title} - {run_date.strftime('%m%d')}, {run_date.year}"), styles["h1"]),
        Spacer(1, 10),
    ]

    if not len(report):
        story.append(Paragraph("No items found for this run.", styles["p"]))

    for index, result in enumerate(report, start=1):
        if result.kind == EMAIL:
            heading = f"{index}. {result.title or '(no subject)'}"
            origin = f"From: {result.origin}"
        else:
            heading = f"{index}. PR #{result.identifier}: {result.title}"
            origin = f"Repository: {result.origin}"

        story.append(Paragraph(html.escape(heading), styles["h2"]))
        story.append(Paragraph(html.escape(origin), styles["meta"]))
        story.append(Paragraph(html.escape(result.locator), styles["meta"]))
        story.append(Spacer(1, 6))

        if result.error is not None:
            text = f"Failed ({result.error['kind']}): {result.error['message']}"
            story.append(Paragraph(html.escape(text), styles["error"]))
        else:
            story.append(Preformatted(result.summary or "", styles["summary"], maxLineLength=95))
        story.append(Spacer(1, 12))

    return story


def _build_styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "h1": ParagraphStyle(
            "H1",
            parent=base["Heading1"],
            fontName="Helvetica-Bold",
            fontSize=18,
            leading=22,
            spaceAfter=4,
        ),
        "h2": ParagraphStyle(
            "H2",
            parent=base["Heading2"],
            fontName="Helvetica-Bold",
            fontSize=13,
            leading=17,
            textColor=colors.HexColor("#1f2937"),
        ),
        "meta": ParagraphStyle(
            "META",
            parent=base["BodyText"],
            fontName="Helvetica",
            fontSize=9.5,
            leading=13,
            textColor=colors.HexColor("#4b5563"),
        ),
        "p": ParagraphStyle(
            "P",
            parent=base["BodyText"],
            fontName="Helvetica",
            fontSize=10.5,
            leading=15,
            textColor=colors.HexColor("#111827"),
        ),
        "summary": ParagraphStyle(
            "SUMMARY",
            parent=base["Code"],
            fontName="Helvetica",
            fontSize=10,
            leading=14,
            textColor=colors.HexColor("#111827"),
        ),
        "error": ParagraphStyle(
            "ERROR",
            parent=base["BodyText"],
            fontName="Helvetica-Oblique",
            fontSize=10,
            leading=14,
            textColor=colors.HexColor("#b91c1c"),
        ),
    }
