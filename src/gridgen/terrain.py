"""
Height-map synthesis from octave gradient noise.

A run draws one random offset per octave (a random area of the infinite noise
plane, shifted by the configured ``offset``), samples every cell centred on
the middle of the map, and min/max-normalises the whole map to [0, 1].
Terrain heights are the normalised values, optionally reshaped by a piecewise
linear ``height_curve`` and scaled by ``max_height``.

There is no meaningful step-by-step mode: a single ``step()`` produces the
whole map. ``scroll(dt)`` slides the sampling window along x and re-samples.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import utils
from .base import BaseGenerator, GeneratorConfig
from .noise import NoiseEngine, clamp_scale, normalize, resolve_kernel

OFFSET_RANGE = 100000


@dataclass
class NoiseConfig(GeneratorConfig):
    noise_scale: float = 25.0
    octaves: int = 4
    persistence: float = 0.5
    lacunarity: float = 2.0
    offset: Tuple[float, float] = (0.0, 0.0)
    use_fixed_gradients: bool = True
    interpolation_kernel: str = "quintic"
    max_height: float = 1.0
    # (input, output) control points in [0, 1]; None means identity
    height_curve: Optional[List[Sequence[float]]] = None
    scroll_speed: float = 0.0
    random_octave_offsets: bool = True


def apply_height_curve(
    values: np.ndarray, curve: Optional[Sequence[Sequence[float]]]
) -> np.ndarray:
    """Evaluate a piecewise linear curve at every value (identity for None)."""
    if not curve:
        return values
    points = np.asarray(curve, dtype=np.float64).reshape(-1, 2)
    order = np.argsort(points[:, 0], kind="stable")
    return np.interp(values, points[order, 0], points[order, 1])


class TerrainGenerator(BaseGenerator):
    model = "terrain"

    def __init__(self, config: NoiseConfig | None = None) -> None:
        super().__init__(config or NoiseConfig())
        self.engine: Optional[NoiseEngine] = None
        self.base_offsets: Optional[np.ndarray] = None
        self.scroll_offset = 0.0
        self.raw_map: Optional[np.ndarray] = None
        self.noise_map: Optional[np.ndarray] = None
        self.heights: Optional[np.ndarray] = None

    def validate(self) -> None:
        super().validate()
        cfg = self.config
        if cfg.octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {cfg.octaves}")
        utils.check_probability("persistence", cfg.persistence)
        if cfg.lacunarity < 1:
            raise ValueError(f"lacunarity must be >= 1, got {cfg.lacunarity}")
        if len(cfg.offset) != 2:
            raise ValueError(f"offset must be an (x, y) pair, got {cfg.offset!r}")
        resolve_kernel(cfg.interpolation_kernel)
        if cfg.height_curve is not None:
            points = np.asarray(cfg.height_curve, dtype=np.float64)
            if points.ndim != 2 or points.shape[1] != 2 or len(points) < 2:
                raise ValueError("height_curve needs at least two (input, output) points")

    # --------------------------------------------------------------- lifecycle
    def _prepare_initial_state(self) -> None:
        cfg = self.config
        self.engine = NoiseEngine(self.rng)
        if cfg.random_octave_offsets:
            self.base_offsets = self.rng.integers(
                -OFFSET_RANGE, OFFSET_RANGE, size=(cfg.octaves, 2)
            ).astype(np.float64)
        else:
            self.base_offsets = np.zeros((cfg.octaves, 2), dtype=np.float64)
        self.scroll_offset = 0.0
        self.raw_map = None
        self.noise_map = None
        self.heights = None

    def clear(self) -> None:
        super().clear()
        self.engine = None
        self.base_offsets = None
        self.scroll_offset = 0.0
        self.raw_map = None
        self.noise_map = None
        self.heights = None

    @property
    def noise_scale(self) -> float:
        return clamp_scale(self.config.noise_scale)

    def octave_offsets(self) -> np.ndarray:
        """Per-octave offsets: the drawn base, the configured offset and the scroll."""
        x, y = self.config.offset
        return self.base_offsets + np.array([x + self.scroll_offset, y], dtype=np.float64)

    def is_done(self) -> bool:
        return self.heights is not None

    def step(self) -> bool:
        self._require_prepared()
        if self.is_done():
            return False
        self._sample()
        return False

    def _sample(self) -> None:
        cfg = self.config
        self.raw_map = self.engine.noise_map(
            cfg.width,
            cfg.height,
            self.noise_scale,
            cfg.octaves,
            cfg.lacunarity,
            cfg.persistence,
            self.octave_offsets(),
            cfg.interpolation_kernel,
            cfg.use_fixed_gradients,
        )
        self.noise_map = normalize(self.raw_map)
        self.heights = apply_height_curve(self.noise_map, cfg.height_curve) * cfg.max_height

        if cfg.verbose:
            print(
                f"[terrain] sampled {cfg.width}x{cfg.height}, octaves={cfg.octaves}, "
                f"raw range [{self.raw_map.min():.4f}, {self.raw_map.max():.4f}]"
            )

    # ------------------------------------------------------------------ public
    def scroll(self, dt: float) -> np.ndarray:
        """Slide the window along x by ``scroll_speed * dt`` and re-sample the map."""
        self._require_prepared()
        self.scroll_offset += self.config.scroll_speed * dt
        self._sample()
        return self.heights

    def result(self) -> utils.GridResult:
        self._require_prepared()
        cfg = self.config
        meta = {
            "model": self.model,
            "width": cfg.width,
            "height": cfg.height,
            "seed": self.seed,
            "noise_scale": self.noise_scale,
            "octaves": cfg.octaves,
            "persistence": cfg.persistence,
            "lacunarity": cfg.lacunarity,
            "offset": tuple(cfg.offset),
            "scroll_offset": self.scroll_offset,
            "kernel": cfg.interpolation_kernel,
            "use_fixed_gradients": cfg.use_fixed_gradients,
            "raw_min": float(self.raw_map.min()),
            "raw_max": float(self.raw_map.max()),
            "heights": self.heights.copy(),
        }
        return utils.GridResult(grid=self.noise_map.copy(), meta=meta)


def run_model(params: NoiseConfig | dict | None = None) -> utils.GridResult:
    """
    Synthesize a normalised noise height map and return a GridResult.
    """
    if params is None:
        params = NoiseConfig()
    elif isinstance(params, dict):
        params = NoiseConfig(**params)

    return TerrainGenerator(params).generate()


__all__ = ["NoiseConfig", "TerrainGenerator", "apply_height_curve", "run_model"]
