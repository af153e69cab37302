# app/services/overlay.py
"""
Region overlay lifecycle.

One OverlayManager owns at most one live RegionOverlay:
  - load()    installs a new layer, then retires the previous one (if any);
              a rejected geometry leaves the previous overlay live
  - recolor() restyles the live layer in place, geometry untouched

Colours come from the fixed amarillo/naranja/rojo table; fill, stroke and
width are derived from the one selected colour.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.contracts import (
    SEVERITY_COLORS,
    GeoJSON,
    OverlayState,
    OverlayView,
    SeverityLevel,
    SeverityLevelInfo,
    StyleSpec,
)
from app.core.keying import geometry_key
from app.core.time import utc_now_iso
from app.services.map_layers import MapCapability, MapLayer

logger = logging.getLogger(__name__)


class NoActiveOverlayError(RuntimeError):
    pass


@dataclass
class RegionOverlay:
    region: Optional[str]
    geometry: GeoJSON
    level: SeverityLevel
    style: StyleSpec
    layer: MapLayer
    geometry_key: str
    created_at: str
    updated_at: str


def severity_levels() -> list[SeverityLevelInfo]:
    return [
        SeverityLevelInfo(level=level, label=level.capitalize(), color=color)  # type: ignore
        for level, color in SEVERITY_COLORS.items()
    ]


class OverlayManager:
    def __init__(
        self,
        *,
        map_capability: MapCapability,
        layer_name: str = "Alertas Regionales",
        fill_opacity: float = 0.3,
        stroke_width: int = 2,
    ):
        self.map = map_capability
        self.layer_name = layer_name
        self.fill_opacity = fill_opacity
        self.stroke_width = stroke_width
        self._current: Optional[RegionOverlay] = None

    @property
    def current(self) -> Optional[RegionOverlay]:
        return self._current

    def style_for(self, level: SeverityLevel) -> StyleSpec:
        color = SEVERITY_COLORS.get(level)
        if color is None:
            raise ValueError(f"unknown severity level: {level!r}")
        return StyleSpec(
            fill_color=color,
            fill_opacity=self.fill_opacity,
            stroke_color=color,
            stroke_width=self.stroke_width,
        )

    def load(self, geometry: GeoJSON, level: SeverityLevel, *, region: Optional[str] = None) -> RegionOverlay:
        style = self.style_for(level)

        layer = self.map.add_layer(self.layer_name, geometry, style)
        self._retire()

        now = utc_now_iso()
        self._current = RegionOverlay(
            region=region,
            geometry=geometry,
            level=level,
            style=style,
            layer=layer,
            geometry_key=geometry_key(geometry),
            created_at=now,
            updated_at=now,
        )
        logger.info("overlay_load region=%s level=%s layer=%s", region, level, layer.layer_id)
        return self._current

    def recolor(self, level: SeverityLevel) -> RegionOverlay:
        ov = self._current
        if ov is None:
            raise NoActiveOverlayError("Load a region first.")

        style = self.style_for(level)
        self.map.restyle(ov.layer, style)
        ov.level = level
        ov.style = style
        ov.updated_at = utc_now_iso()
        logger.info("overlay_recolor region=%s level=%s layer=%s", ov.region, level, ov.layer.layer_id)
        return ov

    def clear(self) -> bool:
        """Retire the live overlay. Returns False when there was none."""
        return self._retire()

    def _retire(self) -> bool:
        ov = self._current
        if ov is None:
            return False
        self._current = None
        self.map.remove_layer(ov.layer)
        logger.info("overlay_retire region=%s layer=%s", ov.region, ov.layer.layer_id)
        return True


def describe(ov: RegionOverlay) -> OverlayState:
    return OverlayState(
        layer_id=ov.layer.layer_id,
        layer_name=ov.layer.name,
        region=ov.region,
        level=ov.level,
        style=ov.style,
        geometry_key=ov.geometry_key,
        feature_count=len(ov.layer.features),
        created_at=ov.created_at,
        updated_at=ov.updated_at,
    )


def view(ov: RegionOverlay, geojson: GeoJSON) -> OverlayView:
    return OverlayView(**describe(ov).model_dump(), geojson=geojson)
