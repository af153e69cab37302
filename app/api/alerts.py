from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from app.core.contracts import AlertEventSummary, AlertRecord, AlertTable
from app.core.errors import bad_request, service_unavailable
from app.core.settings import settings
from app.services.alerts import build_table, event_summary, parse_feed
from app.services.feeds import FeedFetchError, fetch_feed, is_feed_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts")


class FeedParseRequest(BaseModel):
    text: str
    filename: Optional[str] = None  # original upload name, checked when present


class FeedSource(BaseModel):
    url: str
    filename_prefix: str


class AlertEventRequest(BaseModel):
    record: Optional[AlertRecord] = None  # the selected table row


@router.get("/source", response_model=FeedSource)
def alerts_source() -> FeedSource:
    return FeedSource(
        url=settings.alerts_feed_url,
        filename_prefix=settings.alerts_feed_filename_prefix,
    )


@router.post("/parse", response_model=AlertTable)
def alerts_parse(req: FeedParseRequest) -> AlertTable:
    prefix = settings.alerts_feed_filename_prefix
    if req.filename is not None and not is_feed_filename(req.filename, prefix):
        bad_request("bad_feed_file", f'Select a file whose name starts with "{prefix}".')

    result = parse_feed(req.text)
    return build_table(result, source_text=req.text)


@router.post("/fetch", response_model=AlertTable)
async def alerts_fetch() -> AlertTable:
    try:
        text = await fetch_feed(
            settings.alerts_feed_url,
            timeout_s=settings.alerts_feed_timeout_s,
            user_agent=settings.alerts_feed_user_agent,
        )
    except FeedFetchError as e:
        service_unavailable("feed_unavailable", str(e))

    result = parse_feed(text)
    return build_table(result, source_text=text)


@router.post("/event", response_model=AlertEventSummary)
def alerts_event(req: AlertEventRequest) -> AlertEventSummary:
    if req.record is None:
        bad_request("no_row_selected", "Select a row first.")
    summary = event_summary(req.record)
    logger.info("alerts_event id=%s", summary.id)
    return summary
