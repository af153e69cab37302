from __future__ import annotations

import base64
import hashlib
from typing import Any

import orjson


def _orjson_dumps(obj: Any) -> bytes:
    return orjson.dumps(
        obj,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def sha256_b32(data: bytes) -> str:
    h = hashlib.sha256(data).digest()
    # URL-safe base32-ish: we use base64 urlsafe with no padding for brevity
    return base64.urlsafe_b64encode(h).decode("ascii").rstrip("=")


def feed_key(text: str) -> str:
    """Content key of a raw feed, so clients can tell a re-upload of the same file."""
    return sha256_b32((text or "").encode("utf-8"))


def geometry_key(geometry: Any) -> str:
    """
    Content key of a region geometry payload.

    Key order inside the GeoJSON does not matter; feature order does.
    """
    return sha256_b32(_orjson_dumps(geometry))
