# app/services/map_layers.py
"""
Map capability used by the overlay manager.

The host map (the editor running in the browser) renders layers; the backend
only needs something that can add, remove and restyle a layer. `InMemoryMap`
is that something for the HTTP presenter: it keeps the live layers and can
render one as a plain GeoJSON FeatureCollection for the client to draw.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from app.core.contracts import GeoJSON, StyleSpec

logger = logging.getLogger(__name__)

_GEOMETRY_TYPES = {
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
}


class InvalidGeometryError(ValueError):
    pass


@dataclass
class MapLayer:
    layer_id: str
    name: str
    geometry: GeoJSON
    features: List[Dict[str, Any]]
    style: StyleSpec
    restyles: int = 0


class MapCapability(Protocol):
    def add_layer(self, name: str, geometry: GeoJSON, style: StyleSpec) -> MapLayer: ...

    def remove_layer(self, layer: MapLayer) -> None: ...

    def restyle(self, layer: MapLayer, style: StyleSpec) -> None: ...


def read_features(geometry: Any) -> List[Dict[str, Any]]:
    """Feature list of a GeoJSON payload (FeatureCollection, Feature or bare geometry)."""
    if not isinstance(geometry, dict) or not isinstance(geometry.get("type"), str):
        raise InvalidGeometryError("geometry must be a GeoJSON object with a 'type' member")

    t = geometry["type"]
    if t == "FeatureCollection":
        features = geometry.get("features")
        if not isinstance(features, list):
            raise InvalidGeometryError("FeatureCollection.features must be an array")
        return list(features)
    if t == "Feature":
        return [geometry]
    if t in _GEOMETRY_TYPES:
        return [{"type": "Feature", "geometry": geometry, "properties": {}}]
    raise InvalidGeometryError(f"unsupported GeoJSON type: {t}")


class InMemoryMap:
    def __init__(self) -> None:
        self._layers: Dict[str, MapLayer] = {}
        self._seq = itertools.count(1)

    @property
    def layers(self) -> List[MapLayer]:
        return list(self._layers.values())

    def get(self, layer_id: str) -> MapLayer | None:
        return self._layers.get(layer_id)

    def add_layer(self, name: str, geometry: GeoJSON, style: StyleSpec) -> MapLayer:
        features = read_features(geometry)
        layer = MapLayer(
            layer_id=f"layer-{next(self._seq)}",
            name=name,
            geometry=geometry,
            features=features,
            style=style,
        )
        self._layers[layer.layer_id] = layer
        logger.debug("map_add_layer id=%s features=%d", layer.layer_id, len(features))
        return layer

    def remove_layer(self, layer: MapLayer) -> None:
        # Removing a layer that is already gone is a no-op, like the editor map
        self._layers.pop(layer.layer_id, None)
        logger.debug("map_remove_layer id=%s", layer.layer_id)

    def restyle(self, layer: MapLayer, style: StyleSpec) -> None:
        if layer.layer_id not in self._layers:
            raise KeyError(f"layer not on map: {layer.layer_id}")
        layer.style = style
        layer.restyles += 1
        logger.debug("map_restyle id=%s fill=%s", layer.layer_id, style.fill_color)

    def render(self, layer: MapLayer) -> GeoJSON:
        return {"type": "FeatureCollection", "features": list(layer.features)}
