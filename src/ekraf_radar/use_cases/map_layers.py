"""Map overlay instructions for the external map collaborator.

Turns a snapshot into "draw this polygon with this style and this popup"
calls. Regions without registered geometry are skipped (logged), the
remaining regions are still drawn.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from ekraf_radar.domain.encoding import EncodingBounds, emphasize, style_for
from ekraf_radar.domain.formatting import region_popup
from ekraf_radar.domain.models import DashboardSnapshot, RegionGeometry, RegionStyle
from ekraf_radar.domain.regions import RegionRegistry

logger = logging.getLogger(__name__)


class MapLayer(BaseModel):
    """One drawable region."""

    model_config = ConfigDict(frozen=True)

    region: str
    geometry: RegionGeometry
    style: RegionStyle
    popup: str


class MapRenderer(Protocol):
    """What the engine needs from the mapping library."""

    def draw_region(self, geometry: RegionGeometry, style: RegionStyle, popup: str) -> None:
        ...


def build_map_layers(
    snapshot: DashboardSnapshot,
    registry: RegionRegistry,
    bounds: EncodingBounds | None = None,
) -> tuple[list[MapLayer], list[str]]:
    """Layers for every region of the snapshot that has a boundary.

    Returns:
        Tuple of (layers, names of regions skipped for missing geometry)
    """
    metrics = {m.region: m for m in snapshot.regions}
    layers: list[MapLayer] = []
    skipped: list[str] = []

    for encoding in snapshot.encodings:
        geometry = registry.get(encoding.region)
        if geometry is None:
            logger.info("No geometry for region %r, skipping", encoding.region)
            skipped.append(encoding.region)
            continue
        layers.append(MapLayer(
            region=encoding.region,
            geometry=geometry,
            style=style_for(encoding, bounds),
            popup=region_popup(metrics[encoding.region]),
        ))
    return layers, skipped


def render_map(layers: list[MapLayer], renderer: MapRenderer) -> int:
    """Hand every layer to the renderer; returns the number drawn."""
    for layer in layers:
        renderer.draw_region(layer.geometry, layer.style, layer.popup)
    return len(layers)


class MapInteraction:
    """Transient emphasis for pointer focus.

    Hover/leave/click only swap styles for display; the layers and the
    aggregation state they came from are never modified.
    """

    def __init__(self, layers: list[MapLayer], bounds: EncodingBounds | None = None) -> None:
        self._layers = {layer.region: layer for layer in layers}
        self._bounds = bounds or EncodingBounds()
        self.focused: str | None = None

    def on_hover(self, region: str) -> RegionStyle | None:
        layer = self._layers.get(region)
        if layer is None:
            return None
        self.focused = region
        return emphasize(layer.style, self._bounds)

    def on_leave(self, region: str) -> RegionStyle | None:
        layer = self._layers.get(region)
        if layer is None:
            return None
        if self.focused == region:
            self.focused = None
        return layer.style

    def on_click(self, region: str) -> tuple[RegionStyle, str] | None:
        """Emphasized style plus popup content of the clicked region."""
        style = self.on_hover(region)
        if style is None:
            return None
        return style, self._layers[region].popup
