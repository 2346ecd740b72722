"""Visual encoding of region metrics — pure functions (no I/O).

Maps each region's value onto [0, 1] relative to the value range of the
current scope and derives fill/stroke opacity inside configured bounds.
The output is descriptive style data only; drawing is the map
collaborator's job.
"""

from __future__ import annotations

import zlib
from collections.abc import Sequence
from dataclasses import dataclass

from ekraf_radar.config import Settings
from ekraf_radar.domain.models import (
    MetricSelector,
    RegionMetric,
    RegionStyle,
    VisualEncoding,
)

# Intensity for a degenerate range (single region, all equal, all zero)
MIDPOINT = 0.5

PALETTE = (
    "#3b82f6",  # blue
    "#22c55e",  # green
    "#a855f7",  # purple
    "#f97316",  # orange
    "#ef4444",  # red
    "#6366f1",  # indigo
    "#ec4899",  # pink
    "#eab308",  # yellow
    "#14b8a6",  # teal
    "#06b6d4",  # cyan
)

REGION_COLORS: dict[str, str] = {
    "Kota Bandung": "#3b82f6",
    "Kabupaten Bandung": "#6366f1",
    "Kabupaten Bandung Barat": "#06b6d4",
    "Kota Bekasi": "#ef4444",
    "Kabupaten Bekasi": "#f97316",
    "Kota Bogor": "#22c55e",
    "Kabupaten Bogor": "#14b8a6",
    "Kota Depok": "#a855f7",
    "Kabupaten Karawang": "#eab308",
    "Kota Cimahi": "#ec4899",
}


@dataclass(frozen=True)
class EncodingBounds:
    """Opacity floor/ceiling and stroke weights for the overlay."""

    fill_floor: float = 0.4
    fill_ceiling: float = 0.7
    stroke_floor: float = 0.3
    stroke_ceiling: float = 0.8
    stroke_weight: float = 2.0
    emphasis_stroke_weight: float = 4.0
    emphasis_stroke_opacity: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> EncodingBounds:
        return cls(
            fill_floor=settings.fill_opacity_floor,
            fill_ceiling=settings.fill_opacity_ceiling,
            stroke_floor=settings.stroke_opacity_floor,
            stroke_ceiling=settings.stroke_opacity_ceiling,
            stroke_weight=settings.stroke_weight,
            emphasis_stroke_weight=settings.emphasis_stroke_weight,
            emphasis_stroke_opacity=settings.emphasis_stroke_opacity,
        )


def normalize(value: float, low: float, high: float) -> float:
    """
    Position of value inside [low, high].

    Formula: clamp((value - low) / (high - low), 0, 1)

    Returns MIDPOINT when high == low instead of dividing by zero.
    """
    if high == low:
        return MIDPOINT
    return min(1.0, max(0.0, (value - low) / (high - low)))


def scale(intensity: float, floor: float, ceiling: float) -> float:
    """Linear interpolation between floor and ceiling."""
    return round(floor + intensity * (ceiling - floor), 4)


def encode_regions(
    regions: Sequence[RegionMetric],
    metric: MetricSelector = MetricSelector.INVESTMENT,
    bounds: EncodingBounds | None = None,
) -> list[VisualEncoding]:
    """VisualEncoding per region, relative to the min/max of the scope."""
    if not regions:
        return []
    bounds = bounds or EncodingBounds()

    values = [float(m.value(metric)) for m in regions]
    low, high = min(values), max(values)

    encodings: list[VisualEncoding] = []
    for m, value in zip(regions, values):
        intensity = normalize(value, low, high)
        encodings.append(VisualEncoding(
            region=m.region,
            metric=metric,
            value=m.value(metric),
            intensity=round(intensity, 4),
            fill_opacity=scale(intensity, bounds.fill_floor, bounds.fill_ceiling),
            stroke_opacity=scale(intensity, bounds.stroke_floor, bounds.stroke_ceiling),
        ))
    return encodings


def region_color(name: str) -> str:
    """Color from the lookup table, else a stable palette slot via crc32."""
    if name in REGION_COLORS:
        return REGION_COLORS[name]
    return PALETTE[zlib.crc32(name.encode("utf-8")) % len(PALETTE)]


def style_for(
    encoding: VisualEncoding, bounds: EncodingBounds | None = None
) -> RegionStyle:
    """Resting style of one region polygon."""
    bounds = bounds or EncodingBounds()
    color = region_color(encoding.region)
    return RegionStyle(
        fill_color=color,
        fill_opacity=encoding.fill_opacity,
        stroke_color=color,
        stroke_opacity=encoding.stroke_opacity,
        stroke_weight=bounds.stroke_weight,
    )


def emphasize(style: RegionStyle, bounds: EncodingBounds | None = None) -> RegionStyle:
    """Transient highlight on pointer focus; never stored."""
    bounds = bounds or EncodingBounds()
    return style.model_copy(update={
        "stroke_weight": bounds.emphasis_stroke_weight,
        "stroke_opacity": bounds.emphasis_stroke_opacity,
    })
