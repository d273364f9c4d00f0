"""
Rule-based cellular automaton for cave-like maps.

Generation 0 is a random distribution: the border is forced alive (a wall
frame) and every interior cell is alive with ``start_alive_chance``. Each
further generation applies a birth/survival rule through the selected
neighbourhood. Every generation is retained so any past step can be replayed.

The defaults are the classic cave setup: Moore neighbourhood of radius 1,
a 5-4 rule and 45% starting walls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from . import utils
from .base import BaseGenerator, GeneratorConfig
from .neighbourhood import Neighbourhood, make_neighbourhood


@dataclass
class CAConfig(GeneratorConfig):
    generations: int = 5
    start_alive_chance: float = 0.45
    neighbourhood: str = "moore"
    neighbourhood_radius: int = 1
    lower_birth: int = 5
    upper_birth: int = 8
    starvation: int = 4
    over_population: int = 8


class CellularAutomaton(BaseGenerator):
    model = "cellular"

    def __init__(self, config: CAConfig | None = None) -> None:
        super().__init__(config or CAConfig())
        self.neighbourhood: Neighbourhood = make_neighbourhood(
            self.config.neighbourhood, self.config.neighbourhood_radius
        )
        self.tile_data: Optional[np.ndarray] = None
        self.generation_steps: List[np.ndarray] = []
        self.current_generation = 0

    def validate(self) -> None:
        super().validate()
        cfg = self.config
        if cfg.generations < 0:
            raise ValueError(f"generations must be >= 0, got {cfg.generations}")
        if cfg.neighbourhood_radius < 1:
            raise ValueError(
                f"neighbourhood_radius must be >= 1, got {cfg.neighbourhood_radius}"
            )
        utils.check_probability("start_alive_chance", cfg.start_alive_chance)
        for name in ("lower_birth", "upper_birth", "starvation", "over_population"):
            if getattr(cfg, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(cfg, name)}")

    # --------------------------------------------------------------- lifecycle
    def _prepare_initial_state(self) -> None:
        cfg = self.config
        self.neighbourhood = make_neighbourhood(
            cfg.neighbourhood, cfg.neighbourhood_radius
        )
        self.neighbourhood.update_boundaries(cfg.width, cfg.height)

        self.tile_data = self._random_distribution()
        self.generation_steps = [self.tile_data]
        self.current_generation = 0

    def _random_distribution(self) -> np.ndarray:
        cfg = self.config
        draws = self.rng.random((cfg.width, cfg.height))
        grid = draws < cfg.start_alive_chance
        grid[0, :] = True
        grid[-1, :] = True
        grid[:, 0] = True
        grid[:, -1] = True
        return grid

    def clear(self) -> None:
        super().clear()
        self.tile_data = None
        self.generation_steps = []
        self.current_generation = 0

    @property
    def generations_run(self) -> int:
        return max(0, len(self.generation_steps) - 1)

    def is_done(self) -> bool:
        return self.generations_run >= self.config.generations

    def step(self) -> bool:
        self._require_prepared()
        if self.is_done():
            return False

        cfg = self.config
        self.tile_data = self.neighbourhood.apply_rules(
            self.tile_data,
            cfg.lower_birth,
            cfg.upper_birth,
            cfg.starvation,
            cfg.over_population,
        )
        self.generation_steps.append(self.tile_data)
        self.current_generation = self.generations_run

        if cfg.verbose:
            print(
                f"[cellular] generation {self.generations_run}/{cfg.generations}, "
                f"alive={int(self.tile_data.sum())}"
            )
        return not self.is_done()

    # ------------------------------------------------------------------ public
    def show_step(self, generation: int) -> np.ndarray:
        """Select a stored generation for display and return its grid."""
        if not 0 <= generation < len(self.generation_steps):
            raise IndexError(
                f"generation {generation} not in [0, {self.generations_run}]"
            )
        self.current_generation = generation
        return self.generation_steps[generation]

    def result(self) -> utils.GridResult:
        self._require_prepared()
        cfg = self.config
        meta = {
            "model": self.model,
            "width": cfg.width,
            "height": cfg.height,
            "seed": self.seed,
            "generations": self.generations_run,
            "neighbourhood": self.neighbourhood.name,
            "neighbourhood_radius": self.neighbourhood.step_range,
            "rule": (
                cfg.lower_birth,
                cfg.upper_birth,
                cfg.starvation,
                cfg.over_population,
            ),
            "alive_fraction": float(self.tile_data.mean()),
        }
        return utils.GridResult(
            grid=self.tile_data.copy(),
            history=[g.copy() for g in self.generation_steps],
            meta=meta,
        )


def run_model(params: CAConfig | dict | None = None) -> utils.GridResult:
    """
    Run the cellular automaton and return a GridResult.
    """
    if params is None:
        params = CAConfig()
    elif isinstance(params, dict):
        params = CAConfig(**params)

    return CellularAutomaton(params).generate()


__all__ = ["CAConfig", "CellularAutomaton", "run_model"]
