"""Configuration loading for daily summary runs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .prompts import EMAIL_SYSTEM_PROMPT, PULL_REQUEST_SYSTEM_PROMPT


@dataclass(slots=True)
class SourceConfig:
    """Candidate filter and cap for one pipeline."""

    days_ago: int = 1
    max_items: int = 100
    label: str = ""
    query: str = ""


@dataclass(slots=True)
class RuntimeConfig:
    """Runtime behavior configuration."""

    model_name: str = "gpt-4"
    fail_fast: bool = True
    output_dir: str = "digests"
    write_markdown: bool = False
    output_pdf: bool = False
    request_timeout: int = 60


@dataclass(slots=True)
class PromptConfig:
    """System prompts and output budgets for summarization."""

    pull_request_system: str = PULL_REQUEST_SYSTEM_PROMPT
    email_system: str = EMAIL_SYSTEM_PROMPT
    pull_request_max_tokens: int = 500
    email_max_tokens: int = 1000


@dataclass(slots=True)
class Credentials:
    """Service credentials. Read from the environment only, never printed."""

    github_token: str = field(default="", repr=False)
    openai_api_key: str = field(default="", repr=False)
    gmail_token: str = field(default="", repr=False)
    openai_base_url: str = ""


@dataclass(slots=True)
class AppConfig:
    """Application configuration object, built once per run."""

    pull_requests: SourceConfig = field(default_factory=lambda: SourceConfig(max_items=100))
    emails: SourceConfig = field(default_factory=lambda: SourceConfig(max_items=30))
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    prompts: PromptConfig = field(default_factory=PromptConfig)
    credentials: Credentials = field(default_factory=Credentials)


DEFAULT_CONFIG_PATH = Path("config/default_config.json")


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from JSON file and the environment.

    Args:
        path: Custom config path. If omitted, uses the default config when it exists.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        Parsed AppConfig object.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
        ValueError: If a cap or window value is out of range.
    """

    env = os.environ if environ is None else environ
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        data = json.loads(config_path.read_text(encoding="utf-8"))
    elif path:
        raise FileNotFoundError(f"Config not found: {config_path}")
    else:
        data = {}

    pull_requests = _source_config(data.get("pull_requests", {}), cap_key="max_prs", default_cap=100)
    emails = _source_config(data.get("emails", {}), cap_key="max_emails", default_cap=30)

    runtime_data = data.get("runtime", {})
    runtime = RuntimeConfig(
        model_name=runtime_data.get("model", runtime_data.get("model_name", "gpt-4")),
        fail_fast=_read_bool(runtime_data.get("fail_fast", True), "runtime.fail_fast"),
        output_dir=runtime_data.get("output_dir", "digests"),
        write_markdown=_read_bool(runtime_data.get("write_markdown", False), "runtime.write_markdown"),
        output_pdf=_read_bool(
            runtime_data.get("output_pdf", runtime_data.get("OUTPUT_PDF", False)),
            "runtime.output_pdf",
        ),
        request_timeout=int(runtime_data.get("request_timeout", 60)),
    )

    prompt_data = data.get("prompts", {})
    prompts = PromptConfig(
        pull_request_system=prompt_data.get("pull_request_system", PULL_REQUEST_SYSTEM_PROMPT),
        email_system=prompt_data.get("email_system", EMAIL_SYSTEM_PROMPT),
        pull_request_max_tokens=int(prompt_data.get("pull_request_max_tokens", 500)),
        email_max_tokens=int(prompt_data.get("email_max_tokens", 1000)),
    )

    credentials = Credentials(
        github_token=_first(env, "INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"),
        openai_api_key=_first(env, "INPUT_OPENAI_API_KEY", "OPENAI_API_KEY"),
        gmail_token=_first(env, "GMAIL_ACCESS_TOKEN"),
        openai_base_url=_first(env, "OPENAI_BASE_URL"),
    )

    config = AppConfig(
        pull_requests=pull_requests,
        emails=emails,
        runtime=runtime,
        prompts=prompts,
        credentials=credentials,
    )
    _apply_action_inputs(config, env)
    validate_config(config)
    return config


def validate_config(config: AppConfig) -> None:
    for name, source in (("pull_requests", config.pull_requests), ("emails", config.emails)):
        if source.max_items < 1:
            raise ValueError(f"{name}.max_items must be at least 1, got {source.max_items}")
        if source.days_ago < 0:
            raise ValueError(f"{name}.days_ago must not be negative, got {source.days_ago}")


def _source_config(data: dict, cap_key: str, default_cap: int) -> SourceConfig:
    return SourceConfig(
        days_ago=int(data.get("days_ago", 1)),
        max_items=int(data.get(cap_key, data.get("max_items", default_cap))),
        label=str(data.get("label", "")),
        query=str(data.get("query", "")),
    )


def _apply_action_inputs(config: AppConfig, env: Mapping[str, str]) -> None:
    # GitHub Actions exposes `with:` inputs as INPUT_<NAME>; empty means unset.
    model = env.get("INPUT_MODEL", "").strip()
    if model:
        config.runtime.model_name = model
    max_prs = env.get("INPUT_MAX_PRS", "").strip()
    if max_prs:
        config.pull_requests.max_items = int(max_prs)
    days_ago = env.get("INPUT_DAYS_AGO", "").strip()
    if days_ago:
        config.pull_requests.days_ago = int(days_ago)


_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def _read_bool(value: object, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _first(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return ""
