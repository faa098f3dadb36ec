"""GitHub source adapter for pull requests awaiting the user's review."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from .errors import FetchError
from .models import PULL_REQUEST, CandidateItem
from .transport import build_request, read_json, read_text

GITHUB_API_URL = "https://api.github.com"
SEARCH_PAGE_LIMIT = 100
# GitHub search serves at most this many results per query.
SEARCH_RESULT_LIMIT = 1000
DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


class GitHubPullRequestSource:
    """List open pull requests requesting the user's review and fetch their diffs."""

    def __init__(
        self,
        token: str,
        days_ago: int = 1,
        max_items: int = 100,
        label: str = "",
        query: str = "",
        api_url: str = GITHUB_API_URL,
        timeout: int = 30,
    ):
        self.token = token
        self.days_ago = days_ago
        self.max_items = max_items
        self.label = label
        self.query = query
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def search_recent(self, now: datetime | None = None) -> list[CandidateItem]:
        """Search pull requests created inside the window, in GitHub's ranking order."""

        login = self._authenticated_login()
        search_query = self._build_query(login, now or datetime.now(timezone.utc))

        candidates: list[CandidateItem] = []
        per_page = min(SEARCH_PAGE_LIMIT, self.max_items)
        page = 1
        while len(candidates) < self.max_items:
            payload = read_json(
                build_request(
                    f"{self.api_url}/search/issues",
                    headers=self._headers(),
                    params={"q": search_query, "per_page": per_page, "page": page},
                ),
                timeout=self.timeout,
                phase="search",
            )
            if not isinstance(payload, dict):
                raise FetchError("GitHub search returned an unexpected payload", phase="search")
            items = payload.get("items") or []
            candidates.extend(_item_to_candidate(item) for item in items)

            total = int(payload.get("total_count") or 0)
            if len(items) < per_page or page * per_page >= min(total, SEARCH_RESULT_LIMIT):
                break
            page += 1

        return candidates[: self.max_items]

    def fetch_detail(self, candidate: CandidateItem) -> str:
        """Return the pull request as unified diff text."""

        owner = candidate.metadata["owner"]
        repo = candidate.metadata["repo"]
        request = build_request(
            f"{self.api_url}/repos/{owner}/{repo}/pulls/{candidate.identifier}",
            headers=self._headers(accept=DIFF_MEDIA_TYPE),
        )
        return read_text(
            request,
            timeout=self.timeout,
            phase="detail",
            item_id=candidate.identifier,
            origin=candidate.origin,
        )

    def _build_query(self, login: str, now: datetime) -> str:
        start = now.astimezone(timezone.utc) - timedelta(days=self.days_ago)
        terms = [
            "is:open",
            "is:pr",
            f"review-requested:{login}",
            f"created:>={start.strftime('%Y-%m-%dT%H:%M:%SZ')}",
        ]
        if self.label:
            terms.append(f'label:"{self.label}"')
        if self.query:
            terms.append(self.query)
        return " ".join(terms)

    def _authenticated_login(self) -> str:
        user = read_json(
            build_request(f"{self.api_url}/user", headers=self._headers()),
            timeout=self.timeout,
            phase="search",
        )
        if not isinstance(user, dict) or not user.get("login"):
            raise FetchError("GitHub /user response has no login", phase="search")
        return str(user["login"])

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        return {
            "Accept": accept,
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }


def _item_to_candidate(item: dict) -> CandidateItem:
    parts = str(item.get("repository_url") or "").rstrip("/").split("/")
    if len(parts) < 2 or not all(parts[-2:]) or not str(item.get("number", "")).isdigit():
        raise FetchError(
            f"Search result is missing repository_url or number: {item.get('html_url') or item}",
            item_id=item.get("number"),
            phase="search",
        )
    owner, repo = parts[-2:]
    return CandidateItem(
        kind=PULL_REQUEST,
        identifier=int(item["number"]),
        title=str(item.get("title") or ""),
        origin=f"{owner}/{repo}",
        locator=str(item.get("html_url") or ""),
        created_at=_parse_dt(item.get("created_at")),
        description=str(item.get("body") or ""),
        metadata={"owner": owner, "repo": repo},
    )


def _parse_dt(text: str | None) -> datetime | None:
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).astimezone(timezone.utc)
    except ValueError:
        return None
