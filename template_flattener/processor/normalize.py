"""Numeric normalizers for decoded layer signals.

Converts the heterogeneous encodings decoders emit into the canonical
representation of the template model:
- Opacity: 0-1 or 0-255 (no unit tag)  -> float in [0, 1]
- Colour:  RGB channels 0-255 (float/int) -> "#rrggbb"
- Boxes:   fractional left/top/right/bottom -> integer x/y/width/height
"""

import math

from template_flattener.schema.models import Geometry


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up.

    Python's round() uses banker's rounding (round(2.5) == 2); layer
    coordinates are rounded half-up so 2.5 -> 3 and -2.5 -> -2.
    """
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Opacity
# ---------------------------------------------------------------------------

def normalize_opacity(raw) -> float:
    """Map a raw opacity of ambiguous unit to [0, 1].

    Policy:
        0 < raw <= 1    -> raw          (already normalized)
        1 < raw <= 255  -> raw / 255    (byte range)
        anything else   -> 1.0          (0, negative, > 255, None, NaN)

    Examples:
        0.5  -> 0.5
        128  -> 0.50196...
        0    -> 1.0
        None -> 1.0
        300  -> 1.0

    An explicit zero opacity is indistinguishable from "no data" under
    this policy.
    """
    if raw is None or isinstance(raw, bool):
        return 1.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 1.0
    if math.isnan(value):
        return 1.0
    if 0 < value <= 1:
        return value
    if 1 < value <= 255:
        return value / 255
    return 1.0


# ---------------------------------------------------------------------------
# Colour
# ---------------------------------------------------------------------------

def _channel(value) -> int:
    return min(255, max(0, round_half_up(float(value))))


def rgb_to_hex(r, g, b) -> str:
    """Format an RGB triple (0-255, float or int) as lowercase ``#rrggbb``.

    Examples:
        (255, 0, 128) -> "#ff0080"
        (0, 0, 0)     -> "#000000"
        (12.6, 0, 0)  -> "#0d0000"
    """
    return "#" + "".join(f"{_channel(c):02x}" for c in (r, g, b))


def color_to_hex(color) -> str | None:
    """Format an object with r/g/b attributes, or None when absent."""
    if color is None:
        return None
    return rgb_to_hex(color.r, color.g, color.b)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def _extent(value) -> float:
    """A box edge as a float; None, NaN and infinities count as 0."""
    if value is None:
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


def normalize_box(left, top, right, bottom) -> Geometry:
    """Convert an absolute bounding box to integer x/y/width/height.

    Width and height are rounded from the fractional extents and never
    negative (inverted boxes collapse to zero size). Position is rounded
    but otherwise kept as-is, so layers bleeding off the canvas keep their
    negative offsets. Non-finite edges are treated like missing ones.
    """
    left, top = _extent(left), _extent(top)
    right, bottom = _extent(right), _extent(bottom)
    return Geometry(
        x=round_half_up(left),
        y=round_half_up(top),
        width=max(0, round_half_up(right - left)),
        height=max(0, round_half_up(bottom - top)),
    )
