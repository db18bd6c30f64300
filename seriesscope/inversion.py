from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

from seriesscope.scales import PointScale, XScale
from seriesscope.series import Key, KeyBucket

if TYPE_CHECKING:
    from seriesscope.state import ChartState


_EDGE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class HoverPoint:
    bucket: KeyBucket
    pixel_x: float


def invert_x(x_scale: XScale, pixel: float) -> Key | None:
    """Map a pixel x-position back to a data key, or None outside the plotted range.

    Continuous scales use their analytic inverse, clamped to the domain so the
    range edges land exactly on the extreme keys. Point scales pick the nearest
    category (`round(pixel / step - 0.5)`, half-up) clamped to the domain.
    """

    try:
        pixel = float(pixel)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(pixel) or not contains_pixel(x_scale, pixel):
        return None

    if isinstance(x_scale, PointScale):
        index = x_scale.index_at(pixel)
        if index is None:
            return None
        return x_scale.domain[index]

    key = x_scale.invert(pixel)
    lo, hi = sorted(x_scale.domain)
    if key < lo:
        return lo
    if key > hi:
        return hi
    return key


def contains_pixel(x_scale: XScale, pixel: float) -> bool:
    r0, r1 = sorted(x_scale.range)
    return r0 - _EDGE_TOLERANCE <= pixel <= r1 + _EDGE_TOLERANCE


def nearest_bucket(state: ChartState, pixel: float) -> HoverPoint | None:
    """Resolve a pointer x-position to the first key bucket at or after the inverted key."""

    x_scale = state.scales.x_scale
    key = invert_x(x_scale, pixel)
    if key is None:
        return None
    bucket = state.key_index.nearest(key)
    if bucket is None:
        return None
    pixel_x = x_scale(bucket.key)
    if pixel_x is None:
        return None
    return HoverPoint(bucket=bucket, pixel_x=float(pixel_x))
