from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────────────────────

GeoJSON = Dict[str, Any]

# Manual overlay colouring choices. Not the same vocabulary as the CAP
# severity strings found in the feed.
SeverityLevel = Literal["amarillo", "naranja", "rojo"]

SEVERITY_COLORS: Dict[str, str] = {
    "amarillo": "#ffff00",
    "naranja": "#ffa500",
    "rojo": "#ff0000",
}

# Table ranking classes derived from the feed's free-text severity
CapSeverityClass = Literal["extreme", "severe", "other"]
SeverityRank = Literal[0, 1, 2]


# ──────────────────────────────────────────────────────────────
# Alerts — feed records + table
# ──────────────────────────────────────────────────────────────

class AlertRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str                         # EMMA_ID value, opaque
    severity: str                   # raw <cap:severity> text
    area_description: str
    event_type: str
    effective_from: str             # opaque timestamp string
    effective_until: str            # opaque timestamp string


class FeedParseResult(BaseModel):
    records: List[AlertRecord] = Field(default_factory=list)
    field_counts: Dict[str, int] = Field(default_factory=dict)
    dropped: int = 0                # occurrences discarded by truncation
    warnings: List[str] = Field(default_factory=list)


class AlertRow(AlertRecord):
    rank: SeverityRank = 2
    severity_class: CapSeverityClass = "other"
    row_color: Optional[str] = None  # table tint, None when unclassified


class AlertTable(BaseModel):
    feed_key: str
    created_at: str
    columns: List[str] = Field(default_factory=list)
    rows: List[AlertRow] = Field(default_factory=list)
    field_counts: Dict[str, int] = Field(default_factory=dict)
    dropped: int = 0
    warnings: List[str] = Field(default_factory=list)


class AlertEventSummary(BaseModel):
    id: str
    text: str


# ──────────────────────────────────────────────────────────────
# Region overlays
# ──────────────────────────────────────────────────────────────

class StyleSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    fill_color: str
    fill_opacity: float
    stroke_color: str
    stroke_width: int


class SeverityLevelInfo(BaseModel):
    level: SeverityLevel
    label: str
    color: str


class OverlayState(BaseModel):
    layer_id: str
    layer_name: str
    region: Optional[str] = None
    level: SeverityLevel
    style: StyleSpec
    geometry_key: str
    feature_count: int
    created_at: str
    updated_at: str


class OverlayView(OverlayState):
    geojson: GeoJSON
