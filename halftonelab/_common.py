"""Shared helpers: colour parsing, rounding and the rotated-frame basis."""

import math
from typing import Tuple

import numpy as np


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' to (r,g,b). Handles shorthand '#RGB' too."""
    h = hex_color.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c*2 for c in h)
    if len(h) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        r = int(h[0:2], 16)
        g = int(h[2:4], 16)
        b = int(h[4:6], 16)
    except ValueError:
        raise ValueError(f"Invalid hex color: {hex_color!r}") from None
    return (r, g, b)


def round_half_up(v):
    """Round with halves going towards +inf (2.5 -> 3, -2.5 -> -2).

    Works on scalars and arrays; numpy's own rounding is half-to-even.
    """
    return np.floor(np.asarray(v, dtype=np.float64) + 0.5)


def rotation(angle_deg: float) -> Tuple[float, float]:
    """(cos, sin) of an angle in degrees."""
    rad = angle_deg * math.pi / 180
    return math.cos(rad), math.sin(rad)


def pixel_grid(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """Integer pixel coordinates as float arrays of shape (height, width)."""
    ys, xs = np.mgrid[0:height, 0:width]
    return xs.astype(np.float64), ys.astype(np.float64)


def clamp01(v):
    return np.clip(v, 0.0, 1.0)
