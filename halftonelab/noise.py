"""
Seeded 2D simplex noise and the per-pixel dither hash.

Both are pure functions of their seed. ``SimplexNoise.noise2d`` accepts
scalars or numpy arrays and evaluates elementwise, so whole canvases are
sampled in one call.
"""

import math
from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

_F2 = 0.5 * (math.sqrt(3) - 1)
_G2 = (3 - math.sqrt(3)) / 6

# x/y components of the 12 classic edge gradients of a cube.
_GRAD3 = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)
_GX = _GRAD3[:, 0]
_GY = _GRAD3[:, 1]

_LCG_MOD = 2147483647
_MASK32 = 0xFFFFFFFF


def permutation(seed: int) -> np.ndarray:
    """256-entry permutation shuffled by a Park-Miller LCG, duplicated to 512."""
    p = list(range(256))
    s = int(seed)
    for i in range(255, 0, -1):
        s = (s * 16807) % _LCG_MOD
        j = math.floor((s - 1) / (_LCG_MOD - 1) * (i + 1))
        # a zero state yields -1
        j = max(0, j)
        p[i], p[j] = p[j], p[i]
    table = np.array(p, dtype=np.int64)
    return np.concatenate([table, table])


class SimplexNoise:
    """2D simplex noise over a seeded permutation table."""

    def __init__(self, seed: int):
        self.seed = int(seed)
        self.perm = permutation(self.seed)
        self.perm_mod12 = self.perm % 12

    def noise2d(self, xin: ArrayLike, yin: ArrayLike) -> ArrayLike:
        """Sample noise at (xin, yin); result lies roughly in [-1, 1]."""
        scalar = np.ndim(xin) == 0 and np.ndim(yin) == 0
        x = np.asarray(xin, dtype=np.float64)
        y = np.asarray(yin, dtype=np.float64)

        s = (x + y) * _F2
        i = np.floor(x + s)
        j = np.floor(y + s)
        t = (i + j) * _G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        # Lower or upper triangle of the skewed cell.
        upper = x0 > y0
        i1 = upper.astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + _G2
        y1 = y0 - j1 + _G2
        x2 = x0 - 1 + 2 * _G2
        y2 = y0 - 1 + 2 * _G2

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        perm, pm12 = self.perm, self.perm_mod12
        g0 = pm12[ii + perm[jj]]
        g1 = pm12[ii + i1 + perm[jj + j1]]
        g2 = pm12[ii + 1 + perm[jj + 1]]

        n0 = _contribution(0.5 - x0 * x0 - y0 * y0, g0, x0, y0)
        n1 = _contribution(0.5 - x1 * x1 - y1 * y1, g1, x1, y1)
        n2 = _contribution(0.5 - x2 * x2 - y2 * y2, g2, x2, y2)
        out = 70 * (n0 + n1 + n2)
        return float(out) if scalar else out


def _contribution(t: np.ndarray, g: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Radially decaying kernel of one simplex corner; zero outside its radius."""
    tt = t * t
    contrib = tt * tt * (_GX[g] * x + _GY[g] * y)
    return np.where(t >= 0, contrib, 0.0)


def hash_pixel(x: ArrayLike, y: ArrayLike, seed: int) -> ArrayLike:
    """Deterministic threshold in [0, 1] for pixel (x, y).

    32-bit xor/multiply avalanche; every intermediate is reduced mod 2**32,
    so the thresholds are stable across platforms and releases.
    """
    scalar = np.ndim(x) == 0 and np.ndim(y) == 0
    xs, ys = np.broadcast_arrays(np.atleast_1d(np.asarray(x, dtype=np.int64)),
                                 np.atleast_1d(np.asarray(y, dtype=np.int64)))
    xs = xs.astype(np.uint64)
    ys = ys.astype(np.uint64)
    mask = np.uint64(_MASK32)

    h = np.full(xs.shape, (int(seed) & _MASK32) ^ 0xDEADBEEF, dtype=np.uint64)
    h ^= (xs * np.uint64(374761393)) & mask
    h ^= (ys * np.uint64(668265263)) & mask
    h = ((h ^ (h >> np.uint64(13))) * np.uint64(1274126177)) & mask
    h ^= h >> np.uint64(16)
    out = h.astype(np.float64) / 4294967295
    return float(out[0]) if scalar else out
