import asyncio

import httpx
import pytest

from app.services.feeds import FeedFetchError, fetch_feed, is_feed_filename

PREFIX = "meteoalarm-legacy-atom-spain"


def test_feed_filename_prefix():
    assert is_feed_filename("meteoalarm-legacy-atom-spain.txt", PREFIX)
    assert is_feed_filename("meteoalarm-legacy-atom-spain (2).xml", PREFIX)
    assert is_feed_filename("C:\\Users\\me\\Downloads\\meteoalarm-legacy-atom-spain.txt", PREFIX)
    assert not is_feed_filename("alerts.txt", PREFIX)
    assert not is_feed_filename("", PREFIX)
    assert not is_feed_filename(None, PREFIX)


def test_fetch_feed_returns_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers.get("User-Agent")
        return httpx.Response(200, text="<feed>ok</feed>")

    text = asyncio.run(
        fetch_feed(
            "https://feeds.example/atom",
            timeout_s=5,
            user_agent="tests/feed",
            transport=httpx.MockTransport(handler),
        )
    )
    assert text == "<feed>ok</feed>"
    assert seen["ua"] == "tests/feed"


def test_fetch_feed_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(FeedFetchError):
        asyncio.run(fetch_feed("https://feeds.example/atom", timeout_s=5, transport=transport))


def test_fetch_feed_connect_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FeedFetchError, match="connection refused"):
        asyncio.run(fetch_feed("https://feeds.example/atom", timeout_s=5, transport=httpx.MockTransport(handler)))
