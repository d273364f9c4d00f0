"""
Walk schemes: the set of directions a walker may step in.

A scheme proposes one direction uniformly at random from its legal set, and
knows how to "repeat" a previous direction. On square grids repeating is the
identity. On the hexagonal grid (odd columns shifted half a tile up) the
diagonal neighbours differ between even and odd columns, so a repeated
diagonal has its vertical component re-derived from the current column.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

Direction = Tuple[int, int]

RIGHT: Direction = (1, 0)
LEFT: Direction = (-1, 0)
UP: Direction = (0, 1)
DOWN: Direction = (0, -1)
UP_RIGHT: Direction = (1, 1)
DOWN_RIGHT: Direction = (1, -1)
UP_LEFT: Direction = (-1, 1)
DOWN_LEFT: Direction = (-1, -1)
STAY: Direction = (0, 0)

# Tile layout of the hexagonal board, used by renderers.
HEX_X_OFFSET = 0.755
HEX_Y_OFFSET = 0.435


def hex_tile_position(x: int, y: int) -> Tuple[float, float]:
    """World position of hex tile (x, y); odd columns sit half a tile higher."""
    if x % 2 != 0:
        return x * HEX_X_OFFSET, 2 * HEX_Y_OFFSET * y + HEX_Y_OFFSET
    return x * HEX_X_OFFSET, 2 * HEX_Y_OFFSET * y


class WalkScheme:
    name = "base"
    directions: Tuple[Direction, ...] = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def directions_at(self, x: int, y: int) -> Tuple[Direction, ...]:
        """The legal direction set at (x, y)."""
        return self.directions

    def propose_step(self, rng: np.random.Generator, x: int, y: int) -> Direction:
        options = self.directions_at(x, y)
        return options[int(rng.integers(0, len(options)))]

    def repeat_step(self, previous: Direction, x: int, y: int) -> Direction:
        return previous


class TraditionalScheme(WalkScheme):
    """North, south, east, west (p = 1/4 each)."""

    name = "traditional"
    directions = (RIGHT, LEFT, UP, DOWN)


class EightWaysScheme(WalkScheme):
    """The four cardinal and four diagonal directions (p = 1/8 each)."""

    name = "eight_ways"
    directions = (
        RIGHT,
        LEFT,
        UP,
        DOWN,
        UP_RIGHT,
        DOWN_RIGHT,
        UP_LEFT,
        DOWN_LEFT,
    )


class HexagonalScheme(WalkScheme):
    """Six neighbours of a hex tile (p = 1/6 each)."""

    name = "hexagonal"
    # lower left, upper left, lower right, upper right, down, up
    even_directions = (DOWN_LEFT, LEFT, DOWN_RIGHT, RIGHT, DOWN, UP)
    odd_directions = (LEFT, UP_LEFT, RIGHT, UP_RIGHT, DOWN, UP)
    directions = even_directions

    def directions_at(self, x: int, y: int) -> Tuple[Direction, ...]:
        return self.even_directions if x % 2 == 0 else self.odd_directions

    def repeat_step(self, previous: Direction, x: int, y: int) -> Direction:
        dx, dy = previous
        even = x % 2 == 0
        if dx != 0 and ((dy == 1 and even) or (dy == -1 and not even)):
            return dx, 0
        return previous


WALK_SCHEMES = {
    "traditional": TraditionalScheme,
    "eight_ways": EightWaysScheme,
    "eightways": EightWaysScheme,
    "hexagonal": HexagonalScheme,
}


def make_walk_scheme(name: str) -> WalkScheme:
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return WALK_SCHEMES[key]()
    except KeyError:
        raise ValueError(f"Unknown walk scheme: {name!r}") from None


__all__ = [
    "Direction",
    "WalkScheme",
    "TraditionalScheme",
    "EightWaysScheme",
    "HexagonalScheme",
    "make_walk_scheme",
    "hex_tile_position",
]
