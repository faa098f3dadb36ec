"""Application entry point for pull request and email summaries."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_CONFIG_PATH, AppConfig, SourceConfig, load_config, validate_config
from .errors import AuthenticationError, DigestError
from .github_source import GitHubPullRequestSource
from .gmail_source import GmailSource
from .llm import ChatCompletionClient
from .models import RunReport
from .output_writer import DigestWriter, write_action_output, write_report_json
from .pipeline import SummaryPipeline
from .renderer import REPORT_TITLES
from .summarizer import ItemSummarizer


@dataclass(slots=True)
class RunOutcome:
    """What one CLI run produced."""

    report: RunReport
    json_path: str | None = None
    digest_path: str | None = None


def _source_config(config: AppConfig, kind: str) -> SourceConfig:
    return config.pull_requests if kind == "prs" else config.emails


def _build_runtime_log_lines(config: AppConfig, kind: str) -> list[str]:
    source = _source_config(config, kind)
    runtime = config.runtime
    return [
        f"  pipeline={kind}",
        f"  days_ago={source.days_ago}",
        f"  max_items={source.max_items}",
        f"  label={source.label or 'N/A'}",
        f"  query={source.query or 'N/A'}",
        f"  model_name={runtime.model_name}",
        f"  fail_fast={runtime.fail_fast}",
        f"  write_markdown={runtime.write_markdown}",
        f"  output_pdf={runtime.output_pdf}",
        f"  output_dir={runtime.output_dir}",
    ]


def _build_pipeline(config: AppConfig, kind: str) -> SummaryPipeline:
    source_config = _source_config(config, kind)
    credentials = config.credentials
    timeout = config.runtime.request_timeout

    if kind == "prs":
        if not credentials.github_token:
            raise AuthenticationError("GITHUB_TOKEN is not set", phase="search")
        source = GitHubPullRequestSource(
            token=credentials.github_token,
            days_ago=source_config.days_ago,
            max_items=source_config.max_items,
            label=source_config.label,
            query=source_config.query,
            timeout=timeout,
        )
        system_prompt = config.prompts.pull_request_system
        max_tokens = config.prompts.pull_request_max_tokens
        empty_message = (
            "No pull requests found requiring your review from the last "
            f"{_days_phrase(source_config.days_ago)}."
        )
    else:
        if not credentials.gmail_token:
            raise AuthenticationError("GMAIL_ACCESS_TOKEN is not set", phase="search")
        source = GmailSource(
            token=credentials.gmail_token,
            days_ago=source_config.days_ago,
            max_items=source_config.max_items,
            label=source_config.label,
            query=source_config.query,
            timeout=timeout,
        )
        system_prompt = config.prompts.email_system
        max_tokens = config.prompts.email_max_tokens
        empty_message = f"No emails found from the last {_days_phrase(source_config.days_ago)}."

    if not credentials.openai_api_key:
        raise AuthenticationError("OPENAI_API_KEY is not set", phase="summarize")
    summarizer = ItemSummarizer(
        model_name=config.runtime.model_name,
        system_prompt=system_prompt,
        max_tokens=max_tokens,
        llm_client=ChatCompletionClient(
            api_key=credentials.openai_api_key,
            base_url=credentials.openai_base_url or None,
            timeout=timeout,
        ),
    )

    return SummaryPipeline(
        source=source,
        fetcher=source,
        summarizer=summarizer,
        max_items=source_config.max_items,
        fail_fast=config.runtime.fail_fast,
        empty_message=empty_message,
    )


def _days_phrase(days: int) -> str:
    return "24 hours" if days == 1 else f"{days} days"


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> None:
    source = _source_config(config, args.kind)
    if args.days_ago is not None:
        source.days_ago = args.days_ago
    if args.max_items is not None:
        source.max_items = args.max_items
    if args.label is not None:
        source.label = args.label
    if args.query is not None:
        source.query = args.query
    if args.model is not None:
        config.runtime.model_name = args.model
    if args.no_fail_fast:
        config.runtime.fail_fast = False
    validate_config(config)


def run_pipeline(config: AppConfig, kind: str, output: str | None = None) -> RunOutcome:
    """Build dependencies from config and execute one run."""

    print(f"[STEP] Running {kind} summary with settings:")
    for line in _build_runtime_log_lines(config, kind):
        print(line)

    pipeline = _build_pipeline(config, kind)
    now = datetime.now(timezone.utc)

    print("[STEP] Pipeline execution started")
    report = pipeline.run(now=now)
    outcome = RunOutcome(report=report)

    if output:
        outcome.json_path = write_report_json(report, output)
        print(f"[STEP] Report written: {outcome.json_path}")
    if config.runtime.write_markdown or config.runtime.output_pdf:
        writer = DigestWriter(
            output_dir=config.runtime.output_dir,
            stem_suffix=kind,
            title=REPORT_TITLES[kind],
            output_pdf=config.runtime.output_pdf,
        )
        outcome.digest_path = writer.write(run_date=now.date(), report=report)
        print(f"[STEP] Digest written: {outcome.digest_path}")
    if write_action_output("summary", report.to_json()):
        print("[STEP] Action output 'summary' set")

    return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize pull requests or emails with a language model")
    parser.add_argument(
        "kind",
        nargs="?",
        choices=["prs", "emails"],
        default="prs",
        help="Which items to summarize. Default: prs",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to config json. Default: {DEFAULT_CONFIG_PATH}",
    )
    parser.add_argument("--days-ago", type=int, default=None, help="Only items created/received in the last N days")
    parser.add_argument("--max-items", type=int, default=None, help="Maximum number of items to summarize")
    parser.add_argument("--label", type=str, default=None, help="Restrict to a label")
    parser.add_argument("--query", type=str, default=None, help="Extra free-text search query")
    parser.add_argument("--model", type=str, default=None, help="Model identifier for summarization")
    parser.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Record per-item failures in the report instead of aborting the run",
    )
    parser.add_argument("--output", type=str, default=None, help="Write the JSON report to this path")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI main function."""

    args = build_parser().parse_args(argv)

    try:
        config_path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
        print(f"[STEP] Loading configuration from {config_path.resolve()}")
        config = load_config(args.config)
        _apply_overrides(config, args)
        outcome = run_pipeline(config, args.kind, output=args.output)
    except (DigestError, FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    failures = len(outcome.report.failures)
    print(f"Summarized {len(outcome.report) - failures} item(s), {failures} failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
