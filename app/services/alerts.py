# app/services/alerts.py
"""
Meteoalarm alert feed parser + alert table.

The feed is scanned with one pattern per field instead of being parsed as XML.
Each scan collects every occurrence in document order; the i-th occurrence of
every field is paired into the i-th record. Records are only built for
positions where all six fields matched (n = shortest list), anything past
that is dropped and reported in `warnings`.

Ranking uses case-insensitive substring tests on the severity text:
  "extreme" -> 0, "severe" -> 1, anything else -> 2
and a stable sort, so ties keep feed order.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from app.core.contracts import (
    AlertEventSummary,
    AlertRecord,
    AlertRow,
    AlertTable,
    CapSeverityClass,
    FeedParseResult,
)
from app.core.keying import feed_key
from app.core.time import utc_now_iso

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════
# Field markers
# ══════════════════════════════════════════════════════════════

# Order matters only for the warning text; records are keyed by name.
_FIELD_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("id", re.compile(r"<valueName>EMMA_ID</valueName>\s*<value>(.*?)</value>")),
    ("severity", re.compile(r"<cap:severity>(.*?)</cap:severity>")),
    ("area_description", re.compile(r"<cap:areaDesc>(.*?)</cap:areaDesc>")),
    ("event_type", re.compile(r"<cap:event>(.*?)</cap:event>")),
    ("effective_from", re.compile(r"<cap:effective>(.*?)</cap:effective>")),
    ("effective_until", re.compile(r"<cap:expires>(.*?)</cap:expires>")),
)

TABLE_COLUMNS: List[str] = ["EMMA_ID", "Nivel", "Región", "Evento", "Inicio", "Fin"]

_ROW_COLORS: Dict[str, str] = {
    "extreme": "#ffd6d6",   # soft red
    "severe": "#ffe7c2",    # soft orange
    "moderate": "#fffbc2",  # soft yellow
}


# ══════════════════════════════════════════════════════════════
# Severity classification
# ══════════════════════════════════════════════════════════════

def severity_rank(severity: Optional[str]) -> int:
    s = (severity or "").lower()
    if "extreme" in s:
        return 0
    if "severe" in s:
        return 1
    return 2


_SEVERITY_CLASSES: Tuple[CapSeverityClass, ...] = ("extreme", "severe", "other")


def severity_class(severity: Optional[str]) -> CapSeverityClass:
    return _SEVERITY_CLASSES[severity_rank(severity)]


def row_color(severity: Optional[str]) -> Optional[str]:
    cls = severity_class(severity)
    if cls != "other":
        return _ROW_COLORS[cls]
    if "moderate" in (severity or "").lower():
        return _ROW_COLORS["moderate"]
    return None


def rank_records(records: List[AlertRecord]) -> List[AlertRecord]:
    # sorted() is stable: equal ranks keep extraction order
    return sorted(records, key=lambda r: severity_rank(r.severity))


# ══════════════════════════════════════════════════════════════
# Extraction
# ══════════════════════════════════════════════════════════════

def _scan(text: str) -> Dict[str, List[str]]:
    return {name: pattern.findall(text) for name, pattern in _FIELD_PATTERNS}


def parse_feed(feed_text: Optional[str]) -> FeedParseResult:
    """
    Extract and rank every complete alert record in a feed.

    Never raises on odd input: a feed missing any field entirely yields no
    records. Unequal field counts are truncated to the shortest one and
    surfaced through `dropped` / `warnings`.
    """
    text = feed_text if isinstance(feed_text, str) else ""
    streams = _scan(text)
    counts = {name: len(values) for name, values in streams.items()}
    n = min(counts.values())

    records = [
        AlertRecord(**{name: streams[name][i] for name in streams})
        for i in range(n)
    ]

    dropped = sum(c - n for c in counts.values())
    warnings: List[str] = []
    if dropped:
        extra = ", ".join(f"{name}={c}" for name, c in counts.items() if c > n)
        warnings.append(
            f"alerts: field counts differ, kept {n} complete records and dropped "
            f"{dropped} unmatched occurrences ({extra})"
        )
        logger.warning("alerts_parse_mismatch records=%d dropped=%d counts=%s", n, dropped, counts)

    logger.info("alerts_parse records=%d", n)
    return FeedParseResult(
        records=rank_records(records),
        field_counts=counts,
        dropped=dropped,
        warnings=warnings,
    )


def parse(feed_text: Optional[str]) -> List[AlertRecord]:
    return parse_feed(feed_text).records


# ══════════════════════════════════════════════════════════════
# Table + event summary
# ══════════════════════════════════════════════════════════════

def build_table(result: FeedParseResult, *, source_text: str = "") -> AlertTable:
    rows = [
        AlertRow(
            **rec.model_dump(),
            rank=severity_rank(rec.severity),
            severity_class=severity_class(rec.severity),
            row_color=row_color(rec.severity),
        )
        for rec in result.records
    ]
    return AlertTable(
        feed_key=feed_key(source_text),
        created_at=utc_now_iso(),
        columns=list(TABLE_COLUMNS),
        rows=rows,
        field_counts=dict(result.field_counts),
        dropped=result.dropped,
        warnings=list(result.warnings),
    )


def event_summary(record: AlertRecord) -> AlertEventSummary:
    text = (
        "Evento creado:\n\n"
        f"EMMA_ID: {record.id}\n"
        f"Región: {record.area_description}\n"
        f"Evento: {record.event_type}\n"
        f"Inicio: {record.effective_from}\n"
        f"Fin: {record.effective_until}"
    )
    return AlertEventSummary(id=record.id, text=text)
