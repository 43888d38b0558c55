"""
Source and mask field builders.

Every builder returns a fresh ``float32`` array of shape ``(height, width)``.
Source fields are in [0, 255]; the mask field is a [0, 1] attenuation that
rasterizers multiply into per-pixel darkness.
"""

import logging

import numpy as np

from ._common import clamp01, pixel_grid, rotation
from .noise import SimplexNoise
from .params import BlendMode, GradientParams, NoiseParams, NoiseType, Params, SourceMode

logger = logging.getLogger(__name__)

# Seed offsets keep the warp and mask noise uncorrelated with the source noise.
WARP_SEED_OFFSET = 7919
MASK_SEED_OFFSET = 31337


def noise_field(width: int, height: int, p: NoiseParams) -> np.ndarray:
    """Fractal simplex noise, optionally ridged or domain warped."""
    noise = SimplexNoise(p.seed)
    xs, ys = pixel_grid(width, height)
    dim = min(width, height)
    nx = xs / dim * p.scale
    ny = ys / dim * p.scale

    if p.noise_type is NoiseType.WARP:
        warp = SimplexNoise(p.seed + WARP_SEED_OFFSET)
        wa = p.warp_amount
        nx = nx + warp.noise2d(nx * 0.8, ny * 0.8) * wa
        # y is displaced from the already displaced x
        ny = ny + warp.noise2d(nx * 0.8 + 100, ny * 0.8 + 100) * wa

    val = np.zeros_like(nx)
    amp, freq, max_amp = 1.0, 1.0, 0.0
    for _ in range(p.octaves):
        n = noise.noise2d(nx * freq, ny * freq)
        if p.noise_type is NoiseType.RIDGED:
            n = 1 - np.abs(n)
            n = n * n
            n = n * 2 - 1
        val = val + n * amp
        max_amp += amp
        amp *= p.persistence
        freq *= 2

    val = (val / max_amp + 1) * 0.5
    val = ((val - 0.5) * p.contrast) + 0.5
    val = val + p.brightness / 255
    return (clamp01(val) * 255).astype(np.float32)


def gradient_field(width: int, height: int, p: GradientParams) -> np.ndarray:
    """Directional ramp: fully on before ``start``%, off after ``end``%."""
    dx, dy = rotation(p.direction)
    corners = [cx * dx + cy * dy for cx, cy in ((0, 0), (1, 0), (0, 1), (1, 1))]
    t_min, t_max = min(corners), max(corners)
    t_range = t_max - t_min

    xs, ys = pixel_grid(width, height)
    if t_range > 0:
        raw = ((xs / width) * dx + (ys / height) * dy - t_min) / t_range
    else:
        raw = np.zeros_like(xs)

    start, end = p.start / 100, p.end / 100
    with np.errstate(divide="ignore", invalid="ignore"):
        if start < end:
            t = np.where(raw <= start, 1.0,
                         np.where(raw >= end, 0.0, 1 - (raw - start) / (end - start)))
        elif start > end:
            t = np.where(raw >= start, 1.0,
                         np.where(raw <= end, 0.0, (raw - end) / (start - end)))
        else:
            t = np.full_like(raw, 0.5)
    t = np.power(clamp01(t), p.curve)
    return (t * 255).astype(np.float32)


def blend(noise: np.ndarray, gradient: np.ndarray, mix: float, mode: BlendMode) -> np.ndarray:
    n = noise.astype(np.float64) / 255
    g = gradient.astype(np.float64) / 255
    if mode is BlendMode.MULTIPLY:
        val = n * g
    elif mode is BlendMode.ADD:
        val = np.minimum(1, n * (1 - mix) + g * mix + n * g * mix)
    else:
        val = n * (1 - mix) + g * mix
    return (clamp01(val) * 255).astype(np.float32)


def source_field(width: int, height: int, params: Params) -> np.ndarray:
    """The grayscale intensity field selected by ``params.source_mode``."""
    mode = params.source_mode
    logger.debug("building %s source field %dx%d", mode.value, width, height)
    if mode is SourceMode.NOISE:
        return noise_field(width, height, params.noise)
    if mode is SourceMode.GRADIENT:
        return gradient_field(width, height, params.gradient)
    return blend(
        noise_field(width, height, params.noise),
        gradient_field(width, height, params.gradient),
        params.blend.mix,
        params.blend.mode,
    )


def smoothstep_band(val: np.ndarray, threshold: float, softness: float) -> np.ndarray:
    """0 below ``threshold - softness``, 1 above ``threshold + softness``, Hermite between."""
    low = threshold - softness
    high = threshold + softness
    with np.errstate(divide="ignore", invalid="ignore"):
        t = (val - low) / (high - low)
    t = t * t * (3 - 2 * t)
    return np.where(val <= low, 0.0, np.where(val >= high, 1.0, t))


def mask_field(width: int, height: int, params: Params) -> np.ndarray:
    """Soft [0, 1] attenuation from two-octave noise, vertical bias and edge fade."""
    m = params.mask
    noise = SimplexNoise(params.noise.seed + MASK_SEED_OFFSET)
    xs, ys = pixel_grid(width, height)
    dim = min(width, height)
    nx = xs / dim * m.scale
    ny = ys / dim * m.scale

    val = noise.noise2d(nx, ny) * 0.7
    val = val + noise.noise2d(nx * 2.3, ny * 2.3) * 0.3
    val = (val + 1) * 0.5

    val = val * (1.0 - (1.0 - ys / height) * m.vertical_bias)

    if m.edge_fade > 0:
        edge_x = np.minimum(xs, width - xs) / (width * 0.5)
        edge_y = np.minimum(ys, height - ys) / (height * 0.5)
        val = val * np.minimum(1, np.minimum(edge_x, edge_y) / m.edge_fade)

    logger.debug("mask field %dx%d threshold=%.3f softness=%.3f",
                 width, height, m.threshold, m.softness)
    return smoothstep_band(val, m.threshold, m.softness).astype(np.float32)
