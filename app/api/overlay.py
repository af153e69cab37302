from __future__ import annotations

from typing import List, Optional

import orjson
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.core.contracts import GeoJSON, OverlayState, OverlayView, SeverityLevel, SeverityLevelInfo
from app.core.errors import bad_request, conflict, not_found
from app.core.settings import settings
from app.services.map_layers import InMemoryMap, InvalidGeometryError
from app.services.overlay import NoActiveOverlayError, OverlayManager, describe, severity_levels, view
from app.services.regions import RegionMissingError, RegionStore, UnknownRegionError

router = APIRouter(prefix="/overlay")


def get_map() -> InMemoryMap:
    raise RuntimeError("InMemoryMap must be provided by app dependency override")


def get_overlay_manager() -> OverlayManager:
    raise RuntimeError("OverlayManager must be provided by app dependency override")


def get_region_store() -> RegionStore:
    return RegionStore(regions_dir=settings.regions_dir, count=settings.region_count)


class OverlayLoadRequest(BaseModel):
    region: str
    level: SeverityLevel
    geojson: Optional[GeoJSON] = None  # inline payload; read from the region store when absent


class OverlayRecolorRequest(BaseModel):
    level: SeverityLevel


class OverlayCleared(BaseModel):
    cleared: bool


@router.get("/levels", response_model=List[SeverityLevelInfo])
def overlay_levels() -> List[SeverityLevelInfo]:
    return severity_levels()


@router.get("/regions", response_model=List[str])
def overlay_regions(store: RegionStore = Depends(get_region_store)) -> List[str]:
    return store.codes()


@router.post("/load", response_model=OverlayState)
def overlay_load(
    req: OverlayLoadRequest,
    overlays: OverlayManager = Depends(get_overlay_manager),
    store: RegionStore = Depends(get_region_store),
) -> OverlayState:
    if not store.is_known(req.region):
        not_found("region_unknown", f"unknown region: {req.region}")

    geometry = req.geojson
    if geometry is None:
        try:
            geometry = store.read(req.region)
        except RegionMissingError as e:
            not_found("region_missing", str(e))
        except UnknownRegionError as e:
            not_found("region_unknown", str(e))
        except orjson.JSONDecodeError as e:
            bad_request("bad_geojson", f"error reading GeoJSON for {req.region}: {e}")

    try:
        ov = overlays.load(geometry, req.level, region=req.region)
    except InvalidGeometryError as e:
        bad_request("bad_geojson", str(e))
    return describe(ov)


@router.post("/recolor", response_model=OverlayState)
def overlay_recolor(
    req: OverlayRecolorRequest,
    overlays: OverlayManager = Depends(get_overlay_manager),
) -> OverlayState:
    try:
        ov = overlays.recolor(req.level)
    except NoActiveOverlayError as e:
        conflict("no_active_overlay", str(e))
    return describe(ov)


@router.get("", response_model=OverlayView)
def overlay_get(
    overlays: OverlayManager = Depends(get_overlay_manager),
    map_layers: InMemoryMap = Depends(get_map),
) -> OverlayView:
    ov = overlays.current
    if ov is None:
        not_found("no_active_overlay", "Load a region first.")
    return view(ov, map_layers.render(ov.layer))


@router.delete("", response_model=OverlayCleared)
def overlay_clear(overlays: OverlayManager = Depends(get_overlay_manager)) -> OverlayCleared:
    return OverlayCleared(cleared=overlays.clear())
