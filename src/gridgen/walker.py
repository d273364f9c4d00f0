from __future__ import annotations

import numpy as np

from .walk_schemes import STAY, Direction, WalkScheme


class Walker:
    """
    A digging agent that moves one tile per ``walk()``.

    With direction bias enabled, each step repeats the previous direction with
    ``current_chance``. A repeat multiplies that chance by ``1 - decay_rate``,
    a fresh step resets it to ``bias_chance``. The chance starts at 0, so the
    first step is always fresh.
    """

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        scheme: WalkScheme,
        is_roomie: bool = False,
    ) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.scheme = scheme
        self.is_roomie = is_roomie

        self.bias_enabled = False
        self.bias_chance = 0.0
        self.decay_rate = 0.0
        self.current_chance = 0.0
        self.previous_direction: Direction = STAY
        self.is_repeating_direction = False
        self.spawned_this_tick = True

    def __repr__(self) -> str:
        return (
            f"Walker(x={self.x}, y={self.y}, roomie={self.is_roomie}, "
            f"scheme={self.scheme.name})"
        )

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    def toggle_bias(self, on: bool, chance: float, decay_rate: float) -> None:
        self.bias_enabled = on
        self.bias_chance = chance
        self.decay_rate = decay_rate

    def in_bounds(self, dx: int, dy: int) -> bool:
        """Would moving by (dx, dy) keep the walker on the map?"""
        nx = self.x + dx
        ny = self.y + dy
        return 0 <= nx < self.width and 0 <= ny < self.height

    def walk(self, rng: np.random.Generator) -> None:
        if self.bias_enabled and rng.random() < self.current_chance:
            self.repeat_walk()
            self.current_chance *= 1.0 - self.decay_rate
            self.is_repeating_direction = True
            return

        direction = self._fresh_direction(rng)
        self.previous_direction = direction
        self.current_chance = self.bias_chance
        self.is_repeating_direction = False
        self.x += direction[0]
        self.y += direction[1]

    def _fresh_direction(self, rng: np.random.Generator) -> Direction:
        """
        Rejection-sample an in-bounds direction.

        At most one proposal per direction in the scheme is drawn; after that
        the choice falls back to a uniform pick among the in-bounds directions,
        which has the same distribution but cannot loop forever.
        """
        options = self.scheme.directions_at(self.x, self.y)
        for _ in range(len(options)):
            direction = self.scheme.propose_step(rng, self.x, self.y)
            if self.in_bounds(*direction):
                return direction

        legal = [d for d in options if self.in_bounds(*d)]
        if not legal:
            raise RuntimeError(
                f"walker at {self.position} has no in-bounds direction on a "
                f"{self.width}x{self.height} grid"
            )
        return legal[int(rng.integers(0, len(legal)))]

    def repeat_walk(self) -> bool:
        """Step in the previous direction again; stay put if that leaves the map."""
        direction = self.scheme.repeat_step(self.previous_direction, self.x, self.y)
        if not self.in_bounds(*direction):
            return False
        self.x += direction[0]
        self.y += direction[1]
        self.previous_direction = direction
        return True

    def state(self) -> tuple[int, int, bool, bool, bool]:
        return (
            self.x,
            self.y,
            self.is_roomie,
            self.is_repeating_direction,
            self.spawned_this_tick,
        )
