"""
halftonelab
===========

Deterministic procedural halftone patterns. A seeded grayscale source field
(simplex noise, a directional gradient, or a blend of both) is rasterized as
lines, shapes or dither, and can be exported as an equivalent SVG.

Quick start
-----------
>>> from halftonelab import Params, render, export_vector
>>> params = Params().replace(halftone={"frequency": 60}, noise={"seed": 42})
>>> buf = render(600, 400, params)        # uint8 RGBA, shape (400, 600, 4)
>>> svg = export_vector(600, 400, params) # SVG text

The same ``Params`` and size always give byte-identical output.
"""

from .export import export_filename, generate, render_image, save_png, save_svg
from .halftone import Rasterizer, render, select_rasterizer
from .params import (
    BlendMode, BlendParams, GradientParams, HalftoneParams, MaskParams, NoiseParams,
    NoiseType, Params, RenderMode, Shape, SourceMode, load_params,
)
from .vector import export_vector

__version__ = "0.1.0"

__all__ = [
    "BlendMode", "BlendParams", "GradientParams", "HalftoneParams", "MaskParams",
    "NoiseParams", "NoiseType", "Params", "Rasterizer", "RenderMode", "Shape",
    "SourceMode", "export_filename", "export_vector", "generate", "load_params",
    "render", "render_image", "save_png", "save_svg", "select_rasterizer",
]
