# app/services/regions.py
"""
Region polygon catalogue.

Regions are numbered R01..R<count>; each one is a GeoJSON file named
<code>.geojson under the regions directory. The payload is returned as
decoded JSON and is not inspected here.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import orjson

from app.core.contracts import GeoJSON

logger = logging.getLogger(__name__)


class UnknownRegionError(LookupError):
    pass


class RegionMissingError(LookupError):
    pass


def region_codes(count: int) -> List[str]:
    return [f"R{i:02d}" for i in range(1, int(count) + 1)]


class RegionStore:
    def __init__(self, *, regions_dir: str, count: int = 40):
        self.regions_dir = Path(regions_dir)
        self.count = int(count)

    def codes(self) -> List[str]:
        return region_codes(self.count)

    def is_known(self, code: str) -> bool:
        return code in self.codes()

    def path_for(self, code: str) -> Path:
        if not self.is_known(code):
            raise UnknownRegionError(f"unknown region: {code}")
        return (self.regions_dir / f"{code}.geojson").resolve()

    def read(self, code: str) -> GeoJSON:
        """
        Decode <code>.geojson.

        Raises UnknownRegionError / RegionMissingError, or orjson.JSONDecodeError
        (a ValueError) when the file is not JSON.
        """
        path = self.path_for(code)
        if not path.exists():
            raise RegionMissingError(f"missing region file at {path}")
        data = orjson.loads(path.read_bytes())
        logger.info("region_read code=%s bytes=%d", code, path.stat().st_size)
        return data
