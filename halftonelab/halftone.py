"""
Halftone rasterizers.

Four interchangeable algorithms turn an intensity field (plus an optional mask)
into an RGBA pixel buffer of shape ``(height, width, 4)``:

- stepped_line  bars quantized into cells; one thickness per cell
- smooth_line   bars whose width follows every pixel's darkness
- shape_cell    squares, circles, diamonds, ellipses or crosses on a rotated grid
- dither        per-pixel threshold against a seeded hash

:func:`select_rasterizer` decides which one runs; :func:`render` is the public
entry point.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from ._common import hex_to_rgb, pixel_grid, rotation, round_half_up
from .fields import mask_field, source_field
from .noise import hash_pixel
from .params import HalftoneParams, Params, RenderMode, Shape

logger = logging.getLogger(__name__)


class Rasterizer(Enum):
    DITHER = "dither"
    SHAPE_CELL = "shape_cell"
    STEPPED_LINE = "stepped_line"
    SMOOTH_LINE = "smooth_line"


def select_rasterizer(params: Params) -> Rasterizer:
    """Dither beats any shape, any other non-line shape beats the render mode."""
    shape = params.halftone.shape
    if shape is Shape.DITHER:
        return Rasterizer.DITHER
    if shape is not Shape.LINE:
        return Rasterizer.SHAPE_CELL
    if params.render_mode is RenderMode.STEPPED:
        return Rasterizer.STEPPED_LINE
    return Rasterizer.SMOOTH_LINE


# ---------------------------- Shared geometry --------------------------------

@dataclass(frozen=True)
class Layout:
    """Geometry shared by the raster and vector paths."""
    width: int
    height: int
    period: int
    cos_a: float
    sin_a: float
    diagonal: float

    def cell_length(self, cell_size: float) -> int:
        """Along-line cell length for the stepped line grid."""
        return int(max(2, round_half_up(self.period * cell_size)))


def resolve_layout(width: int, height: int, h: HalftoneParams) -> Layout:
    cos_a, sin_a = rotation(h.angle)
    period = int(max(2, round_half_up(width / h.frequency)))
    return Layout(width, height, period, cos_a, sin_a, math.sqrt(width * width + height * height))


def resolve_colors(h: HalftoneParams) -> Tuple[str, str]:
    """(foreground, background) hex colours after applying ``invert``."""
    if h.invert:
        return h.bg_color, h.fg_color
    return h.fg_color, h.bg_color


def darkness(brightness, invert: bool):
    """Ink amount in [0, 1] for a normalized brightness."""
    return brightness if invert else 1 - brightness


def sample_clamped(field: np.ndarray, xs, ys):
    """Nearest sample with coordinates clamped onto the canvas."""
    height, width = field.shape
    return field[np.clip(ys, 0, height - 1), np.clip(xs, 0, width - 1)]


def sample_or_black(field: np.ndarray, xs, ys) -> np.ndarray:
    """Normalized brightness at integer coordinates; 0 outside the canvas."""
    height, width = field.shape
    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    values = field[np.where(inside, ys, 0), np.where(inside, xs, 0)].astype(np.float64) / 255
    return np.where(inside, values, 0.0)


def background_buffer(width: int, height: int, h: HalftoneParams) -> np.ndarray:
    _, bg = resolve_colors(h)
    buf = np.empty((height, width, 4), dtype=np.uint8)
    buf[..., :3] = hex_to_rgb(bg)
    buf[..., 3] = 0 if h.transparent else 255
    return buf


def paint(buf: np.ndarray, on: np.ndarray, h: HalftoneParams) -> np.ndarray:
    fg, _ = resolve_colors(h)
    buf[on] = hex_to_rgb(fg) + (255,)
    return buf


def pixel_darkness(source: np.ndarray, mask: Optional[np.ndarray], invert: bool) -> np.ndarray:
    d = darkness(source.astype(np.float64) / 255, invert)
    if mask is not None:
        d = d * mask
    return d


# ---------------------------- Rasterizers ------------------------------------

def stepped_line(source: np.ndarray, mask: Optional[np.ndarray], params: Params) -> np.ndarray:
    """Bars made of cells whose thickness is fixed from the field at the cell centre."""
    h = params.halftone
    height, width = source.shape
    lay = resolve_layout(width, height, h)
    period = lay.period
    cell = lay.cell_length(h.cell_size)
    cos_a, sin_a = lay.cos_a, lay.sin_a
    n_across = math.ceil(lay.diagonal / period) + 2
    n_along = math.ceil(lay.diagonal / cell) + 2

    ai = np.arange(-n_across, n_across + 1, dtype=np.float64)[:, None]
    li = np.arange(-n_along, n_along + 1, dtype=np.float64)[None, :]
    cx = round_half_up(cos_a * (ai + 0.5) * period - sin_a * (li + 0.5) * cell).astype(np.int64)
    cy = round_half_up(sin_a * (ai + 0.5) * period + cos_a * (li + 0.5) * cell).astype(np.int64)
    cell_dark = darkness(sample_or_black(source, cx, cy), h.invert)
    if mask is not None:
        cell_dark = cell_dark * sample_clamped(mask, cx, cy)
    thickness = (cell_dark * h.thickness * period).astype(np.float32)

    xs, ys = pixel_grid(width, height)
    across = cos_a * xs + sin_a * ys
    along = -sin_a * xs + cos_a * ys
    pix_ai = np.floor(across / period)
    pix_li = np.floor(along / cell)
    pos = across - pix_ai * period
    row = pix_ai.astype(np.int64) + n_across
    col = pix_li.astype(np.int64) + n_along
    valid = (row >= 0) & (row < thickness.shape[0]) & (col >= 0) & (col < thickness.shape[1])
    bar = thickness[np.clip(row, 0, thickness.shape[0] - 1), np.clip(col, 0, thickness.shape[1] - 1)]
    on = valid & (np.abs(pos - period / 2) <= bar / 2)
    return paint(background_buffer(width, height, h), on, h)


def smooth_line(source: np.ndarray, mask: Optional[np.ndarray], params: Params) -> np.ndarray:
    """Bars whose half-width tracks each pixel's own darkness."""
    h = params.halftone
    height, width = source.shape
    lay = resolve_layout(width, height, h)
    period = lay.period
    xs, ys = pixel_grid(width, height)
    across = lay.cos_a * xs + lay.sin_a * ys
    pos = np.mod(across, period)
    dist = np.abs(pos / period - 0.5) * 2
    on = dist < pixel_darkness(source, mask, h.invert) * h.thickness
    return paint(background_buffer(width, height, h), on, h)


def _inside_square(cx, cy, size):
    return (np.abs(cx) < size * 0.5) & (np.abs(cy) < size * 0.5)


def _inside_circle(cx, cy, size):
    return (cx * cx + cy * cy) < (size * 0.5) * (size * 0.5)


def _inside_diamond(cx, cy, size):
    return (np.abs(cx) + np.abs(cy)) < size * 0.5


def _inside_ellipse(cx, cy, size):
    rx = size * 0.5
    ry = size * 0.25
    with np.errstate(divide="ignore", invalid="ignore"):
        inside = (cx * cx / (rx * rx) + cy * cy / (ry * ry)) < 1
    return inside & (size > 0)


def _inside_cross(cx, cy, size):
    arm_width = size * 0.2
    arm_length = size * 0.5
    return ((np.abs(cx) < arm_width) & (np.abs(cy) < arm_length)) | \
           ((np.abs(cy) < arm_width) & (np.abs(cx) < arm_length))


SHAPE_TESTS: Dict[Shape, Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]] = {
    Shape.SQUARE: _inside_square,
    Shape.CIRCLE: _inside_circle,
    Shape.DIAMOND: _inside_diamond,
    Shape.ELLIPSE: _inside_ellipse,
    Shape.CROSS: _inside_cross,
}


def shape_cell(source: np.ndarray, mask: Optional[np.ndarray], params: Params) -> np.ndarray:
    """One shape per rotated square cell, sized by darkness."""
    h = params.halftone
    height, width = source.shape
    lay = resolve_layout(width, height, h)
    period = lay.period
    cos_a, sin_a = lay.cos_a, lay.sin_a
    xs, ys = pixel_grid(width, height)
    rx = cos_a * xs + sin_a * ys
    ry = -sin_a * xs + cos_a * ys
    cell_x = np.floor(rx / period)
    cell_y = np.floor(ry / period)
    cx = (rx / period - cell_x) - 0.5
    cy = (ry / period - cell_y) - 0.5

    if params.render_mode is RenderMode.STEPPED:
        centre_rx = (cell_x + 0.5) * period
        centre_ry = (cell_y + 0.5) * period
        sx = round_half_up(cos_a * centre_rx - sin_a * centre_ry).astype(np.int64)
        sy = round_half_up(sin_a * centre_rx + cos_a * centre_ry).astype(np.int64)
        brightness = sample_or_black(source, sx, sy)
    else:
        brightness = source.astype(np.float64) / 255

    dark = darkness(brightness, h.invert)
    if mask is not None:
        dark = dark * mask
    size = dark * h.thickness
    on = SHAPE_TESTS[h.shape](cx, cy, size)
    return paint(background_buffer(width, height, h), on, h)


def dither(source: np.ndarray, mask: Optional[np.ndarray], params: Params) -> np.ndarray:
    """Threshold every pixel against its seeded hash."""
    h = params.halftone
    height, width = source.shape
    ys, xs = np.mgrid[0:height, 0:width]
    threshold = hash_pixel(xs, ys, params.noise.seed)
    on = pixel_darkness(source, mask, h.invert) * h.thickness > threshold
    return paint(background_buffer(width, height, h), on, h)


RASTERIZERS: Dict[Rasterizer, Callable[[np.ndarray, Optional[np.ndarray], Params], np.ndarray]] = {
    Rasterizer.DITHER: dither,
    Rasterizer.SHAPE_CELL: shape_cell,
    Rasterizer.STEPPED_LINE: stepped_line,
    Rasterizer.SMOOTH_LINE: smooth_line,
}


# ---------------------------- Entry point ------------------------------------

def build_fields(width: int, height: int, params: Params) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Source field and, when masking is enabled, the mask field."""
    source = source_field(width, height, params)
    mask = mask_field(width, height, params) if params.mask.enabled else None
    return source, mask


def render(width: int, height: int, params: Params) -> np.ndarray:
    """Render ``params`` to an RGBA buffer of shape (height, width, 4)."""
    params = params.clamped()
    source, mask = build_fields(width, height, params)
    kind = select_rasterizer(params)
    logger.debug("rasterizing %dx%d with %s", width, height, kind.value)
    return RASTERIZERS[kind](source, mask, params)
