"""Geo-Region Registry: region name -> boundary polygon.

Loaded once from a GeoJSON FeatureCollection and shared read-only by all
requests. A missing region is not an error: new regions can show up in
the data before their boundary is registered, callers simply skip them.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

from ekraf_radar.domain.models import RegionGeometry

logger = logging.getLogger(__name__)


def normalize_region_name(name: str) -> str:
    """Lookup key: lowercase, single spaces, "Kab." spelled out.

    "KAB. BANDUNG BARAT" and "Kabupaten Bandung Barat" share a key; the
    kota/kabupaten prefix is kept because e.g. Kota Bogor and Kabupaten
    Bogor are distinct regions.
    """
    cleaned = " ".join(name.split()).lower()
    return re.sub(r"^kab\.?\s+", "kabupaten ", cleaned)


def parse_feature_collection(payload: dict[str, Any]) -> dict[str, RegionGeometry]:
    """GeoJSON Polygon features -> RegionGeometry with (lat, lon) vertices."""
    geometries: dict[str, RegionGeometry] = {}
    for feature in payload.get("features", []):
        name = (feature.get("properties") or {}).get("name")
        geometry = feature.get("geometry") or {}
        if not name or geometry.get("type") != "Polygon":
            logger.warning("Skipping region feature without name or polygon: %s", name)
            continue
        # GeoJSON rings are [lon, lat]; only the outer ring is used
        ring = geometry["coordinates"][0]
        geometries[name] = RegionGeometry(
            name=name,
            boundary=tuple((float(lat), float(lon)) for lon, lat in ring),
        )
    return geometries


class RegionRegistry(Mapping[str, RegionGeometry]):
    """Immutable name -> geometry mapping with tolerant lookup."""

    def __init__(self, geometries: Mapping[str, RegionGeometry]) -> None:
        self._geometries = MappingProxyType(dict(geometries))
        self._by_key = MappingProxyType(
            {normalize_region_name(name): geo for name, geo in geometries.items()}
        )

    @classmethod
    def from_file(cls, path: Path) -> RegionRegistry:
        payload = json.loads(path.read_text(encoding="utf-8"))
        registry = cls(parse_feature_collection(payload))
        logger.info("Loaded %d region boundaries from %s", len(registry), path)
        return registry

    def __getitem__(self, name: str) -> RegionGeometry:
        return self._geometries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._geometries)

    def __len__(self) -> int:
        return len(self._geometries)

    def get(self, name: str, default: Any = None) -> Any:  # type: ignore[override]
        """Exact name first, then the normalized key; default on a miss."""
        if name in self._geometries:
            return self._geometries[name]
        return self._by_key.get(normalize_region_name(name), default)


@lru_cache(maxsize=4)
def load_registry(path: Path) -> RegionRegistry:
    """Registry for a GeoJSON file, read once per process."""
    return RegionRegistry.from_file(path)
