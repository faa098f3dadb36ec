"""Thin urllib helpers shared by the REST adapters."""

from __future__ import annotations

import http.client
import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .errors import AuthenticationError, DigestError, FetchError

USER_AGENT = "daily-summary/0.1"


def build_request(
    url: str,
    headers: dict[str, str],
    params: dict[str, Any] | list[tuple[str, Any]] | None = None,
    payload: dict | None = None,
) -> Request:
    if params:
        url = f"{url}?{urlencode(params)}"
    data = None
    method = "GET"
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        headers = {**headers, "Content-Type": "application/json"}
        method = "POST"
    return Request(url, data=data, headers={"User-Agent": USER_AGENT, **headers}, method=method)


def read_text(
    request: Request,
    timeout: int = 30,
    error_cls: type[DigestError] = FetchError,
    phase: str = "search",
    item_id: str | int | None = None,
    origin: str | None = None,
) -> str:
    """Execute a request and return the decoded body.

    HTTP 401 becomes AuthenticationError; every other failure becomes
    ``error_cls`` carrying the remote message.
    """

    context = {"item_id": item_id, "origin": origin, "phase": phase}
    try:
        with urlopen(request, timeout=timeout) as response:
            return response.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        message = _remote_message(exc)
        if exc.code == 401:
            raise AuthenticationError(message, **context) from exc
        raise error_cls(message, **context) from exc
    except URLError as exc:
        raise error_cls(f"Request to {request.full_url} failed: {exc.reason}", **context) from exc
    except TimeoutError as exc:
        raise error_cls(f"Request to {request.full_url} timed out", **context) from exc
    except (OSError, http.client.HTTPException) as exc:
        raise error_cls(f"Request to {request.full_url} failed: {exc!r}", **context) from exc


def read_json(request: Request, **kwargs: Any) -> Any:
    text = read_text(request, **kwargs)
    try:
        return json.loads(text)
    except ValueError as exc:
        error_cls = kwargs.get("error_cls", FetchError)
        raise error_cls(
            f"Invalid JSON from {request.full_url}",
            item_id=kwargs.get("item_id"),
            origin=kwargs.get("origin"),
            phase=kwargs.get("phase", "search"),
        ) from exc


def _remote_message(exc: HTTPError) -> str:
    try:
        body = exc.read().decode("utf-8", errors="replace")
    except Exception:
        body = ""

    try:
        data = json.loads(body) if body else {}
    except ValueError:
        data = {}

    message = ""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            message = str(error.get("message") or "")
        elif isinstance(error, str):
            message = error
        message = message or str(data.get("message") or "")

    if not message:
        message = body.strip() or str(exc.reason)
    return f"HTTP {exc.code}: {message}"
