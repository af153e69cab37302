# app/services/feeds.py
"""
Alert feed sources: uploaded files and the live Meteoalarm export.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class FeedFetchError(RuntimeError):
    pass


def is_feed_filename(filename: Optional[str], prefix: str) -> bool:
    name = (filename or "").strip()
    # Browsers may send a full client path; only the basename counts
    name = name.replace("\\", "/").rsplit("/", 1)[-1]
    return bool(name) and name.startswith(prefix)


async def fetch_feed(
    url: str,
    *,
    timeout_s: float,
    user_agent: str = "regional-alerts/feed",
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Fetch the raw feed text. Any transport or HTTP status failure raises FeedFetchError."""
    transport = transport or httpx.AsyncHTTPTransport(retries=1)
    try:
        async with httpx.AsyncClient(timeout=timeout_s, follow_redirects=True, transport=transport) as client:
            r = await client.get(url, headers={"User-Agent": user_agent})
            r.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("feed_fetch_failed url=%s err=%s", url, e)
        raise FeedFetchError(f"feed fetch failed: {e}") from e

    logger.info("feed_fetch url=%s bytes=%d", url, len(r.content))
    return r.text
