"""
Drunkard's walk grid carver.

One or more walkers stumble across a grid of walls and carve every tile they
touch, until ``target_carve_rate`` of the map is open. Optional features:

1.  **Direction bias:** walkers tend to keep their previous heading, with a
    chance that decays on every repeat (long corridors).
2.  **Levy flights:** occasional bursts of repeated steps in one direction.
3.  **Rooms:** "roomie" walkers stamp room templates around themselves.
4.  **Breeding:** each tick a walker may spawn a new walker at its position,
    up to ``max_walker_count``. New walkers only start moving on the next tick.

Each tick resolves every walker completely (step, levy flight, room) before
moving on to the next one, so batch and incremental runs are identical.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import utils
from .base import BaseGenerator, GeneratorConfig
from .rooms import Room, RoomSpawner
from .walk_schemes import WalkScheme, make_walk_scheme
from .walker import Walker

###############################################################################
# Carve kinds (the event that opened a tile; used for debug colouring)
###############################################################################

WALL = 0
WALK = 1
CORRIDOR = 2
LEVY_FLIGHT = 3
ROOM = 4
NEW_WALKER = 5

CARVE_KIND_NAMES = ("wall", "walk", "corridor", "levy_flight", "room", "new_walker")


@dataclass
class WalkConfig(GeneratorConfig):
    step_scheme: str = "traditional"
    target_carve_rate: float = 0.4
    start_in_center: bool = True
    bias_enabled: bool = False
    bias_chance: float = 0.5
    bias_decay_rate: float = 0.1
    walker_spawn_chance: float = 0.0
    max_walker_count: int = 1
    roomie_chance: float = 0.0
    levy_flight_enabled: bool = False
    levy_flight_chance: float = 0.05
    max_levy_step_length: int = 8
    room_spawn_chance: float = 0.0
    rooms: List[Room | dict | Sequence] = field(default_factory=list)


class DrunkardsWalk(BaseGenerator):
    model = "walk"

    def __init__(self, config: WalkConfig | None = None) -> None:
        super().__init__(config or WalkConfig())
        self.scheme: WalkScheme = make_walk_scheme(self.config.step_scheme)
        self.room_spawner = RoomSpawner(self.config.rooms, self.config.room_spawn_chance)
        self.walkers: List[Walker] = []
        self.tile_data: Optional[np.ndarray] = None
        self.carve_kinds: Optional[np.ndarray] = None
        self.tiles_carved = 0
        self.ticks = 0

    def validate(self) -> None:
        super().validate()
        cfg = self.config
        if cfg.width * cfg.height < 2:
            raise ValueError("a walk needs at least two tiles to move between")
        for name in (
            "target_carve_rate",
            "bias_chance",
            "bias_decay_rate",
            "walker_spawn_chance",
            "roomie_chance",
            "levy_flight_chance",
            "room_spawn_chance",
        ):
            utils.check_probability(name, getattr(cfg, name))
        if cfg.max_walker_count < 1:
            raise ValueError(f"max_walker_count must be >= 1, got {cfg.max_walker_count}")
        if cfg.max_levy_step_length < 1:
            raise ValueError(
                f"max_levy_step_length must be >= 1, got {cfg.max_levy_step_length}"
            )

    # --------------------------------------------------------------- lifecycle
    def _prepare_initial_state(self) -> None:
        cfg = self.config
        self.scheme = make_walk_scheme(cfg.step_scheme)
        self.room_spawner = RoomSpawner(cfg.rooms, cfg.room_spawn_chance)
        self.tile_data = np.zeros((cfg.width, cfg.height), dtype=bool)
        self.carve_kinds = np.full((cfg.width, cfg.height), WALL, dtype=np.int8)
        self.walkers = []
        self.tiles_carved = 0
        self.ticks = 0

        if cfg.start_in_center:
            x, y = cfg.width // 2, cfg.height // 2
        else:
            x = int(self.rng.integers(0, cfg.width))
            y = int(self.rng.integers(0, cfg.height))
        self._spawn_walker(x, y, self.rng.random() < cfg.roomie_chance)

    def clear(self) -> None:
        super().clear()
        self.walkers = []
        self.tile_data = None
        self.carve_kinds = None
        self.tiles_carved = 0
        self.ticks = 0

    @property
    def carve_rate(self) -> float:
        return self.tiles_carved / (self.config.width * self.config.height)

    def is_done(self) -> bool:
        return self.carve_rate >= self.config.target_carve_rate

    def step(self) -> bool:
        """Walk every active walker once; bred walkers join afterwards."""
        self._require_prepared()
        if self.is_done():
            return False

        cfg = self.config
        for walker in self.walkers:
            walker.spawned_this_tick = False

        breed_list: List[Walker] = []
        for walker in self.walkers:
            walker.walk(self.rng)
            self._carve(
                walker.x,
                walker.y,
                CORRIDOR if walker.is_repeating_direction else WALK,
            )

            if cfg.levy_flight_enabled:
                self._levy_flight(walker)
            if walker.is_roomie:
                self._spawn_room(walker)
            if (
                len(self.walkers) + len(breed_list) < cfg.max_walker_count
                and self.rng.random() < cfg.walker_spawn_chance
            ):
                breed_list.append(walker)

        for walker in breed_list:
            self._spawn_walker(
                walker.x, walker.y, self.rng.random() < cfg.roomie_chance
            )

        self.ticks += 1
        if cfg.verbose and self.ticks % 100 == 0:
            print(
                f"[walk] {self.ticks} ticks, carve rate "
                f"{self.carve_rate:.3f}/{cfg.target_carve_rate:.3f}, "
                f"walkers={len(self.walkers)}"
            )
        return not self.is_done()

    # ----------------------------------------------------------------- actions
    def _carve(self, x: int, y: int, kind: int, recolour: bool = False) -> None:
        """Open tile (x, y). Only newly opened tiles count towards the rate."""
        if not self.tile_data[x, y]:
            self.tiles_carved += 1
            self.carve_kinds[x, y] = kind
        elif recolour:
            self.carve_kinds[x, y] = kind
        self.tile_data[x, y] = True

    def _levy_flight(self, walker: Walker) -> None:
        cfg = self.config
        if not self.rng.random() < cfg.levy_flight_chance:
            return
        steps = int(self.rng.integers(1, cfg.max_levy_step_length + 1))
        for _ in range(steps):
            walker.repeat_walk()
            self._carve(walker.x, walker.y, LEVY_FLIGHT)

    def _spawn_room(self, walker: Walker) -> None:
        cfg = self.config
        spawned = self.room_spawner.try_spawn(
            self.rng, walker.x, walker.y, cfg.width, cfg.height
        )
        if spawned is None:
            return
        _, tiles = spawned
        for x, y in tiles:
            self._carve(x, y, ROOM, recolour=True)

    def _spawn_walker(self, x: int, y: int, is_roomie: bool) -> Walker:
        cfg = self.config
        walker = Walker(x, y, cfg.width, cfg.height, self.scheme, is_roomie)
        if cfg.bias_enabled:
            walker.toggle_bias(True, cfg.bias_chance, cfg.bias_decay_rate)
        self.walkers.append(walker)
        self._carve(x, y, NEW_WALKER, recolour=True)
        return walker

    # ------------------------------------------------------------------ public
    def walker_states(self) -> List[Tuple[int, int, bool, bool, bool]]:
        """(x, y, is_roomie, is_repeating_direction, spawned_this_tick) per walker."""
        return [walker.state() for walker in self.walkers]

    def result(self) -> utils.GridResult:
        self._require_prepared()
        cfg = self.config
        meta = {
            "model": self.model,
            "width": cfg.width,
            "height": cfg.height,
            "seed": self.seed,
            "step_scheme": self.scheme.name,
            "ticks": self.ticks,
            "tiles_carved": self.tiles_carved,
            "carve_rate": self.carve_rate,
            "walker_count": len(self.walkers),
            "carve_kinds": self.carve_kinds.copy(),
        }
        return utils.GridResult(
            grid=self.tile_data.copy(),
            walkers=self.walker_states(),
            meta=meta,
        )


def run_model(params: WalkConfig | dict | None = None) -> utils.GridResult:
    """
    Run the drunkard's walk and return a GridResult.
    """
    if params is None:
        params = WalkConfig()
    elif isinstance(params, dict):
        params = WalkConfig(**params)

    return DrunkardsWalk(params).generate()


__all__ = [
    "WalkConfig",
    "DrunkardsWalk",
    "run_model",
    "CARVE_KIND_NAMES",
]
