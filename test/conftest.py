import io
import json
from urllib.error import HTTPError

import pytest

from daily_summary import transport


class FakeResponse:
    def __init__(self, body: bytes):
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeHttp:
    """Stand-in for urlopen that answers by URL substring, first match wins."""

    def __init__(self):
        self.routes = []
        self.requests = []

    def add(self, match, body=None, status=200, error=None, repeat=False):
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        self.routes.append({"match": match, "body": body or "", "status": status, "error": error, "repeat": repeat})

    def urls(self):
        return [request.full_url for request in self.requests]

    def __call__(self, request, timeout=None):
        self.requests.append(request)
        url = request.full_url
        for route in self.routes:
            if route["match"] not in url:
                continue
            if not route["repeat"]:
                self.routes.remove(route)
            if route["error"] is not None:
                raise route["error"]
            body = route["body"].encode("utf-8")
            if route["status"] >= 400:
                raise HTTPError(url, route["status"], "error", None, io.BytesIO(body))
            return FakeResponse(body)
        raise AssertionError(f"Unexpected request: {url}")


@pytest.fixture
def fake_http(monkeypatch):
    fake = FakeHttp()
    monkeypatch.setattr(transport, "urlopen", fake)
    return fake
