"""
SVG export mirroring the raster paths.

Each rasterizer has a vector twin that emits geometric primitives instead of
pixels: run-length rects for dither, rotated bar rects for stepped lines,
variable-width ribbons for smooth lines and native shapes for shape cells.
All primitives share one clipped group filled with the foreground colour.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import svgwrite

from ._common import round_half_up
from .halftone import (
    Rasterizer, build_fields, darkness, pixel_darkness, resolve_colors, resolve_layout,
    sample_clamped, select_rasterizer,
)
from .noise import hash_pixel
from .params import Params, Shape

logger = logging.getLogger(__name__)

# Bars thinner than this many pixels are not emitted.
MIN_BAR_WIDTH = 0.5
MIN_SHAPE_SIZE = 0.01
MAX_SEGMENT_POINTS = 400


def _f(v: float) -> str:
    return f"{v:.1f}"


def _num(v: float) -> str:
    """Plain number: integral values without a decimal point."""
    v = float(v)
    return str(int(v)) if v.is_integer() else repr(v)


# ---------------------------- Accumulators -----------------------------------

class RunAccumulator:
    """Collects horizontal runs of "on" pixels along one scanline.

    ``idle`` until an on pixel opens a run, ``accumulating`` until an off
    pixel (or the row end) closes it.
    """

    def __init__(self):
        self.start: Optional[int] = None

    @property
    def state(self) -> str:
        return "idle" if self.start is None else "accumulating"

    def feed(self, x: int, on: bool) -> Optional[Tuple[int, int]]:
        """Returns (start, length) when a run closes at ``x``."""
        if on:
            if self.start is None:
                self.start = x
            return None
        if self.start is None:
            return None
        run = (self.start, x - self.start)
        self.start = None
        return run


@dataclass
class SegmentAccumulator:
    """Contiguous visible samples along a line, split into segments."""
    current: List[Tuple[float, float, float]] = field(default_factory=list)
    segments: List[List[Tuple[float, float, float]]] = field(default_factory=list)

    @property
    def state(self) -> str:
        return "accumulating" if self.current else "idle"

    def add(self, x: float, y: float, w: float) -> None:
        self.current.append((x, y, w))

    def flush(self) -> None:
        # a lone sample cannot form a ribbon
        if len(self.current) > 1:
            self.segments.append(self.current)
        self.current = []


def downsample(seg: List[Tuple[float, float, float]], limit: int = MAX_SEGMENT_POINTS):
    """Every ``len // limit``-th point, always ending on the last one."""
    step = max(1, len(seg) // limit)
    sampled = seg[::step]
    if (len(seg) - 1) % step != 0:
        sampled.append(seg[-1])
    return sampled


def ribbon_path(seg: List[Tuple[float, float, float]], cos_a: float, sin_a: float) -> str:
    """Closed outline of a centreline offset by half its width on each side."""
    top = []
    bottom = []
    for x, y, w in seg:
        hw = w / 2
        top.append((x + cos_a * hw, y + sin_a * hw))
        bottom.append((x - cos_a * hw, y - sin_a * hw))
    bottom.reverse()
    d = [f"M{_f(top[0][0])},{_f(top[0][1])}"]
    d.extend(f"L{_f(x)},{_f(y)}" for x, y in top[1:])
    d.extend(f"L{_f(x)},{_f(y)}" for x, y in bottom)
    d.append("Z")
    return "".join(d)


# ---------------------------- Vectorizers ------------------------------------

def vector_dither(dwg, group, source, mask, params: Params) -> int:
    h = params.halftone
    height, width = source.shape
    ys, xs = np.mgrid[0:height, 0:width]
    on = pixel_darkness(source, mask, h.invert) * h.thickness > hash_pixel(xs, ys, params.noise.seed)

    count = 0
    for y, row in enumerate(on.tolist()):
        acc = RunAccumulator()
        # one past the end closes a trailing run
        for x, bit in enumerate(row + [False]):
            run = acc.feed(x, bit)
            if run is not None:
                group.add(dwg.rect(insert=(run[0], y), size=(run[1], 1)))
                count += 1
    return count


def vector_stepped_line(dwg, group, source, mask, params: Params) -> int:
    h = params.halftone
    height, width = source.shape
    lay = resolve_layout(width, height, h)
    period = lay.period
    cell = lay.cell_length(h.cell_size)
    n_across = math.ceil(lay.diagonal / period) + 2
    n_along = math.ceil(lay.diagonal / cell) + 2
    angle = _num(h.angle)

    count = 0
    for ai in range(-n_across, n_across + 1):
        for li in range(-n_along, n_along + 1):
            cx = int(round_half_up(lay.cos_a * (ai + 0.5) * period - lay.sin_a * (li + 0.5) * cell))
            cy = int(round_half_up(lay.sin_a * (ai + 0.5) * period + lay.cos_a * (li + 0.5) * cell))
            if cx < -period * 2 or cx >= width + period * 2 or cy < -period * 2 or cy >= height + period * 2:
                continue
            brightness = float(sample_clamped(source, cx, cy)) / 255
            dark = darkness(brightness, h.invert)
            if mask is not None:
                dark *= float(sample_clamped(mask, cx, cy))
            bar = dark * h.thickness * period
            if bar < MIN_BAR_WIDTH:
                continue
            group.add(dwg.rect(
                insert=(_f(-bar / 2), _f(-cell / 2)),
                size=(_f(bar), _f(cell + 0.5)),
                transform=f"translate({cx},{cy}) rotate({angle})",
            ))
            count += 1
    return count


def vector_smooth_line(dwg, group, source, mask, params: Params) -> int:
    h = params.halftone
    height, width = source.shape
    lay = resolve_layout(width, height, h)
    period = lay.period
    cos_a, sin_a, diagonal = lay.cos_a, lay.sin_a, lay.diagonal
    along_x, along_y = -sin_a, cos_a
    num_lines = math.ceil(diagonal / period) + 4
    scan_steps = math.ceil(diagonal)
    steps = np.arange(-scan_steps, scan_steps + 1, dtype=np.float64)

    count = 0
    for line_idx in range(-num_lines, num_lines + 1):
        centre = (line_idx + 0.5) * period
        px = (width / 2) + cos_a * centre + along_x * steps - cos_a * (diagonal / 2)
        py = (height / 2) + sin_a * centre + along_y * steps - sin_a * (diagonal / 2)
        ix = np.floor(px).astype(np.int64)
        iy = np.floor(py).astype(np.int64)
        inside = (ix >= 0) & (ix < width) & (iy >= 0) & (iy < height)
        if not inside.any():
            continue
        dark = darkness(sample_clamped(source, ix, iy).astype(np.float64) / 255, h.invert)
        if mask is not None:
            dark = dark * sample_clamped(mask, ix, iy)
        bar = dark * h.thickness * period
        visible = inside & (bar > MIN_BAR_WIDTH)

        acc = SegmentAccumulator()
        for x, y, w, vis in zip(px.tolist(), py.tolist(), bar.tolist(), visible.tolist()):
            if vis:
                acc.add(x, y, w)
            else:
                acc.flush()
        acc.flush()

        for seg in acc.segments:
            sampled = downsample(seg)
            if len(sampled) < 2:
                continue
            group.add(dwg.path(d=ribbon_path(sampled, cos_a, sin_a)))
            count += 1
    return count


def _circle(dwg, sx, sy, r, arm, angle):
    return [dwg.circle(center=(sx, sy), r=_f(r))]


def _ellipse(dwg, sx, sy, r, arm, angle):
    return [dwg.ellipse(center=(sx, sy), r=(_f(r), _f(r * 0.5)),
                        transform=f"rotate({angle},{sx},{sy})")]


def _square(dwg, sx, sy, r, arm, angle):
    return [dwg.rect(insert=(_f(-r), _f(-r)), size=(_f(r * 2), _f(r * 2)),
                     transform=f"translate({sx},{sy}) rotate({angle})")]


def _diamond(dwg, sx, sy, r, arm, angle):
    points = [(sx, _f(sy - r)), (_f(sx + r), sy), (sx, _f(sy + r)), (_f(sx - r), sy)]
    return [dwg.polygon(points=points, transform=f"rotate({angle},{sx},{sy})")]


def _cross(dwg, sx, sy, r, arm, angle):
    transform = f"translate({sx},{sy}) rotate({angle})"
    return [
        dwg.rect(insert=(_f(-arm / 2), _f(-r)), size=(_f(arm), _f(r * 2)), transform=transform),
        dwg.rect(insert=(_f(-r), _f(-arm / 2)), size=(_f(r * 2), _f(arm)), transform=transform),
    ]


SHAPE_PRIMITIVES = {
    Shape.CIRCLE: _circle,
    Shape.ELLIPSE: _ellipse,
    Shape.SQUARE: _square,
    Shape.DIAMOND: _diamond,
    Shape.CROSS: _cross,
}


def vector_shape_cell(dwg, group, source, mask, params: Params) -> int:
    h = params.halftone
    height, width = source.shape
    lay = resolve_layout(width, height, h)
    period = lay.period
    num_cells = math.ceil(lay.diagonal / period) + 2
    angle = _num(h.angle)
    make = SHAPE_PRIMITIVES[h.shape]

    count = 0
    for cell_x in range(-num_cells, num_cells + 1):
        for cell_y in range(-num_cells, num_cells + 1):
            centre_rx = (cell_x + 0.5) * period
            centre_ry = (cell_y + 0.5) * period
            sx = int(round_half_up(lay.cos_a * centre_rx - lay.sin_a * centre_ry))
            sy = int(round_half_up(lay.sin_a * centre_rx + lay.cos_a * centre_ry))
            if sx < -period * 2 or sx >= width + period * 2 or sy < -period * 2 or sy >= height + period * 2:
                continue
            brightness = float(sample_clamped(source, sx, sy)) / 255
            dark = darkness(brightness, h.invert)
            if mask is not None:
                dark *= float(sample_clamped(mask, sx, sy))
            size = dark * h.thickness
            if size < MIN_SHAPE_SIZE:
                continue
            r = (size * period) / 2
            for element in make(dwg, sx, sy, r, size * 0.2 * period, angle):
                group.add(element)
                count += 1
    return count


VECTORIZERS: Dict[Rasterizer, Callable[..., int]] = {
    Rasterizer.DITHER: vector_dither,
    Rasterizer.SHAPE_CELL: vector_shape_cell,
    Rasterizer.STEPPED_LINE: vector_stepped_line,
    Rasterizer.SMOOTH_LINE: vector_smooth_line,
}


# ---------------------------- Entry point ------------------------------------

def export_vector(width: int, height: int, params: Params) -> str:
    """Render ``params`` as an SVG document string."""
    params = params.clamped()
    source, mask = build_fields(width, height, params)
    fg, bg = resolve_colors(params.halftone)

    dwg = svgwrite.Drawing(size=(width, height), viewBox=f"0 0 {width} {height}", debug=False)
    if not params.halftone.transparent:
        dwg.add(dwg.rect(insert=(0, 0), size=(width, height), fill=bg))
    clip = dwg.defs.add(dwg.clipPath(id="c"))
    clip.add(dwg.rect(insert=(0, 0), size=(width, height)))
    group = dwg.add(dwg.g(clip_path="url(#c)", fill=fg))

    kind = select_rasterizer(params)
    count = VECTORIZERS[kind](dwg, group, source, mask, params)
    logger.debug("vectorized %dx%d with %s: %d primitives", width, height, kind.value, count)
    return dwg.tostring()
