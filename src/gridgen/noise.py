"""
Gradient (Perlin-style) noise.

``NoiseEngine`` owns the lookup tables for one seed:

- a 256-entry permutation of [0, 255], shuffled by the seeded PRNG and doubled
  to 512 entries so ``perm[perm[x] + y]`` never needs a wrap;
- 256 random gradient vectors, each drawn from [-1, 1]^2 and normalised to unit
  length, doubled to 512 entries.

A second gradient source ignores the seed entirely: Ken Perlin's reference
permutation hashes each lattice corner into a fixed set of 16 gradients
(``hash & 0xF``). It reproduces the same values in every run.

Point evaluation returns values in [0, 1]. Octave sums are not normalised;
``normalize`` remaps a whole sampled map afterwards.

Hot loops are compiled with ``numba.njit``.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit

from . import utils

###############################################################################
# Constants
###############################################################################

CUBIC = 0
QUINTIC = 1

KERNELS = {"cubic": CUBIC, "quintic": QUINTIC}

MIN_NOISE_SCALE = 0.001

_REFERENCE_PERMUTATION = np.array(
    [
        151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
        140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
        247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
        57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
        74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
        60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
        65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
        200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
        52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
        207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
        119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
        129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
        218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
        81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
        184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
        222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
    ],
    dtype=np.int64,
)

FIXED_PERMUTATION = np.concatenate([_REFERENCE_PERMUTATION, _REFERENCE_PERMUTATION])
FIXED_PERMUTATION.flags.writeable = False

FIXED_GRADIENT_X = np.array(
    [-1.0, -1.0, -1.0, -1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0, -1.0, 0.0, 1.0, 1.0]
)
FIXED_GRADIENT_Y = np.array(
    [-1.0, 0.0, 0.0, 1.0, -1.0, -1.0, 1.0, 1.0, -1.0, 0.0, 0.0, 1.0, 0.0, -1.0, 1.0, 0.0]
)
FIXED_GRADIENT_X.flags.writeable = False
FIXED_GRADIENT_Y.flags.writeable = False

###############################################################################
# Kernels
###############################################################################


@njit(cache=True)
def _smooth(t: float, kernel: int) -> float:
    """3t^2 - 2t^3 (cubic) or 6t^5 - 15t^4 + 10t^3 (quintic)."""
    if kernel == CUBIC:
        return t * t * (3.0 - 2.0 * t)
    return t * t * t * (t * (6.0 * t - 15.0) + 10.0)


@njit(cache=True)
def _lerp(a: float, b: float, weight: float) -> float:
    return a + weight * (b - a)


@njit(cache=True)
def _gradient_dot(
    perm: np.ndarray,
    grad_x: np.ndarray,
    grad_y: np.ndarray,
    use_fixed: bool,
    xi: int,
    yi: int,
    dx: float,
    dy: float,
) -> float:
    """
    Hashes lattice corner (xi, yi) to a gradient and dots it with the
    corner-to-point offset (dx, dy).
    """
    if use_fixed:
        g = perm[(perm[xi] + yi) & 0xFF] & 0xF
    else:
        g = perm[perm[xi] + yi]
    return dx * grad_x[g] + dy * grad_y[g]


@njit(cache=True)
def _noise2d(
    x: float,
    y: float,
    perm: np.ndarray,
    grad_x: np.ndarray,
    grad_y: np.ndarray,
    use_fixed: bool,
    kernel: int,
) -> float:
    fx = math.floor(x)
    fy = math.floor(y)
    x0 = int(fx) & 0xFF
    y0 = int(fy) & 0xFF
    x1 = (x0 + 1) & 0xFF
    y1 = (y0 + 1) & 0xFF

    rx = x - fx
    ry = y - fy

    s = _gradient_dot(perm, grad_x, grad_y, use_fixed, x0, y0, rx, ry)
    t = _gradient_dot(perm, grad_x, grad_y, use_fixed, x1, y0, rx - 1.0, ry)
    u = _gradient_dot(perm, grad_x, grad_y, use_fixed, x0, y1, rx, ry - 1.0)
    v = _gradient_dot(perm, grad_x, grad_y, use_fixed, x1, y1, rx - 1.0, ry - 1.0)

    sx = _smooth(rx, kernel)
    sy = _smooth(ry, kernel)

    a = _lerp(s, t, sx)
    b = _lerp(u, v, sx)
    c = _lerp(a, b, sy)
    return (c + 1.0) / 2.0


@njit(cache=True)
def _noise_octaves(
    x: float,
    y: float,
    octaves: int,
    lacunarity: float,
    persistence: float,
    offsets_x: np.ndarray,
    offsets_y: np.ndarray,
    perm: np.ndarray,
    grad_x: np.ndarray,
    grad_y: np.ndarray,
    use_fixed: bool,
    kernel: int,
) -> float:
    frequency = 1.0
    amplitude = 1.0
    height = 0.0
    for i in range(octaves):
        sample_x = (x + offsets_x[i]) * frequency
        sample_y = (y + offsets_y[i]) * frequency
        value = _noise2d(sample_x, sample_y, perm, grad_x, grad_y, use_fixed, kernel)
        height += (value * 2.0 - 1.0) * amplitude
        amplitude *= persistence
        frequency *= lacunarity
    return height


@njit(cache=True)
def _noise_map(
    width: int,
    height: int,
    scale: float,
    octaves: int,
    lacunarity: float,
    persistence: float,
    offsets_x: np.ndarray,
    offsets_y: np.ndarray,
    perm: np.ndarray,
    grad_x: np.ndarray,
    grad_y: np.ndarray,
    use_fixed: bool,
    kernel: int,
) -> np.ndarray:
    """Samples every grid cell, centred on the middle of the map."""
    out = np.empty((width, height), dtype=np.float64)
    half_width = width / 2.0
    half_height = height / 2.0
    for y in range(height):
        for x in range(width):
            sample_x = (x - half_width) / scale
            sample_y = (y - half_height) / scale
            out[x, y] = _noise_octaves(
                sample_x,
                sample_y,
                octaves,
                lacunarity,
                persistence,
                offsets_x,
                offsets_y,
                perm,
                grad_x,
                grad_y,
                use_fixed,
                kernel,
            )
    return out


###############################################################################
# Helpers
###############################################################################


def resolve_kernel(kernel: str | int) -> int:
    if isinstance(kernel, str):
        try:
            return KERNELS[kernel.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown interpolation kernel: {kernel!r}") from None
    if kernel not in (CUBIC, QUINTIC):
        raise ValueError(f"Unknown interpolation kernel: {kernel!r}")
    return int(kernel)


def clamp_scale(noise_scale: float) -> float:
    """Non-positive scales would divide by zero; clamp to a small epsilon."""
    return noise_scale if noise_scale > 0 else MIN_NOISE_SCALE


def normalize(values: np.ndarray) -> np.ndarray:
    """
    Inverse-lerp every value between the observed min and max.
    A zero-range input maps to all zeros.
    """
    values = np.asarray(values, dtype=np.float64)
    lo = float(values.min())
    hi = float(values.max())
    if hi == lo:
        return np.zeros_like(values)
    return (values - lo) / (hi - lo)


def _split_offsets(
    offsets: Optional[Sequence[Tuple[float, float]]], octaves: int
) -> Tuple[np.ndarray, np.ndarray]:
    if offsets is None:
        return np.zeros(octaves), np.zeros(octaves)
    arr = np.asarray(offsets, dtype=np.float64).reshape(-1, 2)
    if arr.shape[0] < octaves:
        raise ValueError(f"need {octaves} octave offsets, got {arr.shape[0]}")
    return np.ascontiguousarray(arr[:, 0]), np.ascontiguousarray(arr[:, 1])


def build_tables(rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    """
    Random permutation and gradient tables, both doubled to 512 entries.

    The gradients are drawn first, then the permutation is shuffled
    back to front, so the PRNG is consumed in a fixed order.
    """
    perm = np.arange(256, dtype=np.int64)
    gradients = np.zeros((256, 2), dtype=np.float64)
    for i in range(256):
        gx = (int(rng.integers(0, 512)) - 256) / 256
        gy = (int(rng.integers(0, 512)) - 256) / 256
        length = math.hypot(gx, gy)
        if length > 1e-5:
            gradients[i, 0] = gx / length
            gradients[i, 1] = gy / length

    for i in range(255, 0, -1):
        j = int(rng.integers(0, 256))
        perm[i], perm[j] = perm[j], perm[i]

    return np.concatenate([perm, perm]), np.concatenate([gradients, gradients])


###############################################################################
# Engine
###############################################################################


class NoiseEngine:
    """Seed-owned noise tables plus point, octave and map evaluation."""

    def __init__(self, rng: np.random.Generator) -> None:
        perm, gradients = build_tables(rng)
        self.permutation = perm
        self.gradient_x = np.ascontiguousarray(gradients[:, 0])
        self.gradient_y = np.ascontiguousarray(gradients[:, 1])
        for table in (self.permutation, self.gradient_x, self.gradient_y):
            table.flags.writeable = False

    @classmethod
    def from_seed(cls, seed: str) -> "NoiseEngine":
        return cls(utils.make_rng(seed))

    @property
    def gradients(self) -> np.ndarray:
        return np.column_stack((self.gradient_x, self.gradient_y))

    def _tables(self, use_fixed_gradients: bool) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if use_fixed_gradients:
            return FIXED_PERMUTATION, FIXED_GRADIENT_X, FIXED_GRADIENT_Y
        return self.permutation, self.gradient_x, self.gradient_y

    def noise2d(
        self,
        x: float,
        y: float,
        kernel: str | int = "quintic",
        use_fixed_gradients: bool = True,
    ) -> float:
        """Gradient noise at (x, y), in [0, 1]."""
        perm, gx, gy = self._tables(use_fixed_gradients)
        return float(
            _noise2d(
                float(x),
                float(y),
                perm,
                gx,
                gy,
                bool(use_fixed_gradients),
                resolve_kernel(kernel),
            )
        )

    def noise_with_octaves(
        self,
        x: float,
        y: float,
        octaves: int,
        lacunarity: float,
        persistence: float,
        offsets: Optional[Sequence[Tuple[float, float]]] = None,
        kernel: str | int = "quintic",
        use_fixed_gradients: bool = True,
    ) -> float:
        """
        Sum of ``octaves`` layers of ``2 * noise2d - 1``. Each layer samples
        ``frequency * (point + offset_i)``; amplitude is multiplied by
        ``persistence`` and frequency by ``lacunarity`` after every layer.
        """
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        offsets_x, offsets_y = _split_offsets(offsets, octaves)
        perm, gx, gy = self._tables(use_fixed_gradients)
        return float(
            _noise_octaves(
                float(x),
                float(y),
                int(octaves),
                float(lacunarity),
                float(persistence),
                offsets_x,
                offsets_y,
                perm,
                gx,
                gy,
                bool(use_fixed_gradients),
                resolve_kernel(kernel),
            )
        )

    def noise_map(
        self,
        width: int,
        height: int,
        noise_scale: float,
        octaves: int,
        lacunarity: float,
        persistence: float,
        offsets: Optional[Sequence[Tuple[float, float]]] = None,
        kernel: str | int = "quintic",
        use_fixed_gradients: bool = True,
    ) -> np.ndarray:
        """Raw (un-normalised) octave noise for a ``width x height`` grid."""
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        offsets_x, offsets_y = _split_offsets(offsets, octaves)
        perm, gx, gy = self._tables(use_fixed_gradients)
        return _noise_map(
            int(width),
            int(height),
            float(clamp_scale(noise_scale)),
            int(octaves),
            float(lacunarity),
            float(persistence),
            offsets_x,
            offsets_y,
            perm,
            gx,
            gy,
            bool(use_fixed_gradients),
            resolve_kernel(kernel),
        )


__all__ = [
    "NoiseEngine",
    "build_tables",
    "normalize",
    "clamp_scale",
    "resolve_kernel",
    "CUBIC",
    "QUINTIC",
    "FIXED_PERMUTATION",
]
