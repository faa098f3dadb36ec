import base64
from datetime import datetime, timezone
from urllib.error import URLError
from urllib.parse import parse_qs, urlparse

import pytest

from daily_summary.errors import AuthenticationError, FetchError
from daily_summary.gmail_source import GmailSource, decode_body, extract_plain_text
from daily_summary.models import EMAIL, CandidateItem

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def encode(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def test_multipart_message_prefers_plain_text_part() -> None:
    payload = {
        "mimeType": "multipart/alternative",
        "parts": [
            {"mimeType": "text/html", "body": {"data": encode("<p>Hello</p>")}},
            {"mimeType": "text/plain", "body": {"data": encode("Hello there")}},
            {"mimeType": "text/plain", "body": {"data": encode("second")}},
        ],
    }

    assert extract_plain_text(payload) == "Hello there"


def test_multipart_message_without_plain_text_yields_empty_string() -> None:
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [
            {"mimeType": "text/html", "body": {"data": encode("<p>Only html</p>")}},
            {"mimeType": "application/pdf", "body": {"attachmentId": "abc"}},
        ],
    }

    assert extract_plain_text(payload) == ""


def test_nested_multipart_is_searched_depth_first() -> None:
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [
            {
                "mimeType": "multipart/alternative",
                "parts": [
                    {"mimeType": "text/plain", "body": {"data": encode("nested body")}},
                    {"mimeType": "text/html", "body": {"data": encode("<b>nested</b>")}},
                ],
            },
            {"mimeType": "application/pdf", "body": {"attachmentId": "abc"}},
        ],
    }

    assert extract_plain_text(payload) == "nested body"


def test_single_part_message_uses_top_level_body() -> None:
    payload = {"mimeType": "text/plain", "body": {"data": encode("Plain message ✓")}}

    assert extract_plain_text(payload) == "Plain message ✓"


def test_message_without_body_data_yields_empty_string() -> None:
    assert extract_plain_text({"mimeType": "text/plain", "body": {"size": 0}}) == ""
    assert extract_plain_text({}) == ""


def test_decode_body_restores_stripped_padding() -> None:
    assert decode_body(encode("ab")) == "ab"
    assert decode_body(encode("a?b>c")) == "a?b>c"


def metadata(message_id: str, subject: str) -> dict:
    return {
        "id": message_id,
        "threadId": f"t-{message_id}",
        "internalDate": "1792400000000",
        "snippet": "snippet text",
        "payload": {
            "headers": [
                {"name": "From", "value": "Ada <ada@example.com>"},
                {"name": "Subject", "value": subject},
                {"name": "Date", "value": "Sun, 18 Oct 2026 09:00:00 +0000"},
            ]
        },
    }


def test_search_recent_lists_messages_and_loads_headers(fake_http) -> None:
    fake_http.add("/messages?", {"messages": [{"id": "m1"}, {"id": "m2"}]})
    fake_http.add("/messages/m1?format=metadata", metadata("m1", "Quarterly plan"))
    fake_http.add("/messages/m2?format=metadata", metadata("m2", "Lunch"))
    source = GmailSource(token="g", days_ago=1, max_items=30, label="INBOX")

    candidates = source.search_recent(now=NOW)

    list_query = parse_qs(urlparse(fake_http.urls()[0]).query)
    start = int(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc).timestamp())
    assert list_query["q"] == [f"after:{start} label:INBOX"]
    assert list_query["maxResults"] == ["30"]

    assert [item.identifier for item in candidates] == ["m1", "m2"]
    first = candidates[0]
    assert first.kind == EMAIL
    assert first.title == "Quarterly plan"
    assert first.origin == "Ada <ada@example.com>"
    assert first.locator == "https://mail.google.com/mail/u/0/#all/m1"
    assert first.metadata["date"] == "Sun, 18 Oct 2026 09:00:00 +0000"
    assert first.description == "snippet text"

    metadata_query = parse_qs(urlparse(fake_http.urls()[1]).query)
    assert metadata_query["metadataHeaders"] == ["From", "Subject", "Date"]


def test_search_recent_follows_page_tokens_up_to_max_items(fake_http) -> None:
    fake_http.add("/messages?", {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "tok"})
    fake_http.add("pageToken=tok", {"messages": [{"id": "c"}, {"id": "d"}], "nextPageToken": "tok2"})
    for message_id in "abc":
        fake_http.add(f"/messages/{message_id}?format=metadata", metadata(message_id, message_id))
    source = GmailSource(token="g", max_items=3)

    candidates = source.search_recent(now=NOW)

    assert [item.identifier for item in candidates] == ["a", "b", "c"]
    second_list = parse_qs(urlparse(fake_http.urls()[1]).query)
    assert second_list["pageToken"] == ["tok"]
    assert second_list["maxResults"] == ["1"]
    assert not any("/messages/d?" in url for url in fake_http.urls())


def test_empty_mailbox_returns_no_candidates(fake_http) -> None:
    fake_http.add("/messages?", {"resultSizeEstimate": 0})
    source = GmailSource(token="g")

    assert source.search_recent(now=NOW) == []
    assert len(fake_http.requests) == 1


def email_candidate() -> CandidateItem:
    return CandidateItem(
        kind=EMAIL,
        identifier="m1",
        title="Quarterly plan",
        origin="Ada <ada@example.com>",
        locator="https://mail.google.com/mail/u/0/#all/m1",
    )


def test_fetch_detail_decodes_full_message(fake_http) -> None:
    fake_http.add(
        "/messages/m1?format=full",
        {"payload": {"mimeType": "multipart/alternative", "parts": [
            {"mimeType": "text/plain", "body": {"data": encode("Agenda attached.")}},
        ]}},
    )
    source = GmailSource(token="g")

    assert source.fetch_detail(email_candidate()) == "Agenda attached."


def test_expired_token_raises_authentication_error(fake_http) -> None:
    fake_http.add("/messages/m1", {"error": {"code": 401, "message": "Invalid Credentials"}}, status=401)
    source = GmailSource(token="expired")

    with pytest.raises(AuthenticationError, match="Invalid Credentials"):
        source.fetch_detail(email_candidate())


def test_transport_failure_raises_fetch_error(fake_http) -> None:
    fake_http.add("/messages?", error=URLError("connection refused"))
    source = GmailSource(token="g")

    with pytest.raises(FetchError, match="connection refused"):
        source.search_recent(now=NOW)


@pytest.mark.parametrize("data", ["abcde", "bodé"])
def test_malformed_body_data_raises_fetch_error(data) -> None:
    with pytest.raises(FetchError, match="not valid base64url") as excinfo:
        decode_body(data)

    assert excinfo.value.phase == "detail"


def test_fetch_detail_with_corrupt_body_raises_fetch_error(fake_http) -> None:
    fake_http.add(
        "/messages/m1?format=full",
        {"payload": {"mimeType": "text/plain", "body": {"data": "éé"}}},
    )
    source = GmailSource(token="g")

    with pytest.raises(FetchError, match="not valid base64url"):
        source.fetch_detail(email_candidate())


def test_list_entry_without_id_raises_fetch_error(fake_http) -> None:
    fake_http.add("/messages?", {"messages": [{"threadId": "t1"}]})
    source = GmailSource(token="g")

    with pytest.raises(FetchError, match="no id"):
        source.search_recent(now=NOW)

    assert len(fake_http.requests) == 1
