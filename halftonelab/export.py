"""File export helpers around :func:`render` and :func:`export_vector`."""

import logging
import os
from typing import Optional

from PIL import Image

from .halftone import render
from .params import Params
from .vector import export_vector

logger = logging.getLogger(__name__)


def export_filename(seed: int, ext: str, scale: int = 1) -> str:
    """Download-style name, e.g. ``halftone-pattern-500-2x.png``."""
    suffix = f"-{scale}x" if scale > 1 else ""
    return f"halftone-pattern-{seed}{suffix}.{ext}"


def render_image(width: int, height: int, params: Params, scale: int = 1) -> Image.Image:
    """Render to a Pillow RGBA image, optionally upscaled.

    Upscaling multiplies the canvas and the halftone frequency together, so the
    line period stays the same in pixels and a 2x export shows twice as many lines.
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")
    if scale > 1:
        params = params.replace(halftone={"frequency": params.halftone.frequency * scale})
    buf = render(width * scale, height * scale, params)
    return Image.fromarray(buf)


def save_png(out_path: str, width: int, height: int, params: Params, scale: int = 1) -> str:
    """Render and write a PNG. Returns the out_path after saving."""
    img = render_image(width, height, params, scale=scale)
    img.save(out_path, format="PNG", optimize=True)
    logger.debug("wrote %s (%dx%d)", out_path, img.width, img.height)
    return out_path


def save_svg(out_path: str, width: int, height: int, params: Params) -> str:
    """Export and write an SVG. Returns the out_path after saving."""
    svg = export_vector(width, height, params)
    with open(out_path, "w", encoding="utf-8") as fh:
        fh.write(svg)
    logger.debug("wrote %s (%d bytes)", out_path, len(svg))
    return out_path


def resolve_out_path(out: str, params: Params, ext: str, scale: int = 1) -> str:
    """Use ``out`` as is, or name a file inside it when it is a directory."""
    if os.path.isdir(out):
        return os.path.join(out, export_filename(params.noise.seed, ext, scale))
    return out


def generate(
    out_path: str,
    width: int,
    height: int,
    params: Optional[Params] = None,
    svg: bool = False,
    scale: int = 1,
) -> str:
    """High-level convenience: write a PNG (or SVG) and return its path.

    ``scale`` only applies to PNG output; vector output is resolution free.
    """
    params = params or Params()
    if svg:
        return save_svg(resolve_out_path(out_path, params, "svg"), width, height, params)
    path = resolve_out_path(out_path, params, "png", scale)
    return save_png(path, width, height, params, scale=scale)
