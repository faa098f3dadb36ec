"""Gmail source adapter for recently received messages."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timedelta, timezone

from .errors import FetchError
from .models import EMAIL, CandidateItem
from .transport import build_request, read_json

GMAIL_API_URL = "https://gmail.googleapis.com/gmail/v1/users/me"
GMAIL_WEB_URL = "https://mail.google.com/mail/u/0/#all"
LIST_PAGE_LIMIT = 500
METADATA_HEADERS = ("From", "Subject", "Date")


class GmailSource:
    """List recent messages and fetch their plain-text bodies."""

    def __init__(
        self,
        token: str,
        days_ago: int = 1,
        max_items: int = 30,
        label: str = "",
        query: str = "",
        api_url: str = GMAIL_API_URL,
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
        """List messages received inside the window, newest first as Gmail ranks them."""

        search_query = self._build_query(now or datetime.now(timezone.utc))
        message_ids: list[str] = []
        page_token = ""

        while len(message_ids) < self.max_items:
            params = {
                "q": search_query,
                "maxResults": min(LIST_PAGE_LIMIT, self.max_items - len(message_ids)),
            }
            if page_token:
                params["pageToken"] = page_token
            payload = read_json(
                build_request(f"{self.api_url}/messages", headers=self._headers(), params=params),
                timeout=self.timeout,
                phase="search",
            )
            if not isinstance(payload, dict):
                raise FetchError("Gmail message list returned an unexpected payload", phase="search")
            for item in payload.get("messages") or []:
                if not isinstance(item, dict) or not item.get("id"):
                    raise FetchError("Gmail message list entry has no id", phase="search")
                message_ids.append(str(item["id"]))
            page_token = payload.get("nextPageToken") or ""
            if not page_token:
                break

        return [self._load_candidate(message_id) for message_id in message_ids[: self.max_items]]

    def fetch_detail(self, candidate: CandidateItem) -> str:
        """Return the decoded plain-text body, or an empty string when there is none."""

        message = read_json(
            build_request(
                f"{self.api_url}/messages/{candidate.identifier}",
                headers=self._headers(),
                params={"format": "full"},
            ),
            timeout=self.timeout,
            phase="detail",
            item_id=candidate.identifier,
            origin=candidate.origin,
        )
        if not isinstance(message, dict):
            raise FetchError(
                "Gmail returned an unexpected message payload",
                item_id=candidate.identifier,
                origin=candidate.origin,
                phase="detail",
            )
        return extract_plain_text(message.get("payload") or {})

    def _build_query(self, now: datetime) -> str:
        start = now.astimezone(timezone.utc) - timedelta(days=self.days_ago)
        terms = [f"after:{int(start.timestamp())}"]
        if self.label:
            terms.append(f"label:{self.label}")
        if self.query:
            terms.append(self.query)
        return " ".join(terms)

    def _load_candidate(self, message_id: str) -> CandidateItem:
        request = build_request(
            f"{self.api_url}/messages/{message_id}",
            headers=self._headers(),
            params=[("format", "metadata")] + [("metadataHeaders", name) for name in METADATA_HEADERS],
        )
        message = read_json(request, timeout=self.timeout, phase="search", item_id=message_id)
        if not isinstance(message, dict):
            raise FetchError(
                "Gmail returned an unexpected message payload", item_id=message_id, phase="search"
            )
        headers = _header_map(message.get("payload") or {})

        return CandidateItem(
            kind=EMAIL,
            identifier=message_id,
            title=headers.get("subject", ""),
            origin=headers.get("from", ""),
            locator=f"{GMAIL_WEB_URL}/{message_id}",
            created_at=_parse_internal_date(message.get("internalDate")),
            description=str(message.get("snippet") or ""),
            metadata={"date": headers.get("date", ""), "thread_id": message.get("threadId", "")},
        )

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "Authorization": f"Bearer {self.token}"}


def extract_plain_text(payload: dict) -> str:
    """Decode the message body Gmail returns in ``format=full``.

    Multipart messages use the first ``text/plain`` part (searched depth-first);
    other messages use the top-level body. Missing text yields ``""``.
    """

    if payload.get("parts"):
        part = _first_plain_part(payload["parts"])
        if part is None:
            return ""
        return decode_body(part.get("body", {}).get("data", ""))

    return decode_body((payload.get("body") or {}).get("data", ""))


def decode_body(data: str) -> str:
    """Decode Gmail's base64url body data, tolerating stripped padding.

    Raises:
        FetchError: If the data is not valid base64url.
    """

    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise FetchError(f"Message body is not valid base64url: {exc}", phase="detail") from exc
    return raw.decode("utf-8", errors="replace")


def _first_plain_part(parts: list[dict]) -> dict | None:
    for part in parts:
        mime_type = str(part.get("mimeType", "")).lower()
        if mime_type == "text/plain":
            return part
        if part.get("parts"):
            nested = _first_plain_part(part["parts"])
            if nested is not None:
                return nested
    return None


def _header_map(payload: dict) -> dict[str, str]:
    return {
        str(header.get("name", "")).lower(): str(header.get("value", ""))
        for header in payload.get("headers") or []
    }


def _parse_internal_date(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
