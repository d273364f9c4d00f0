"""
Neighbourhood models for 2D cellular automata.

A neighbourhood maps a cell and a radius ("step range") to the set of cells
around it. Two variants are provided:

    Moore (Chebyshev distance)      Von Neumann (Manhattan distance)

        s = 1     s = 2                 s = 1     s = 2
                  22222                             2
         111      21112                  1         212
         101      21012                 101       21012
         111      21112                  1         212
                  22222                             2

Each variant is reduced to a table of (dx, dy) offsets, which the compiled
kernels walk. Cells outside the bound grid always count as alive, so the map
edge behaves like a solid wall.
"""

from __future__ import annotations

import abc
from typing import List, Tuple

import numpy as np
from numba import njit


###############################################################################
# Kernels
###############################################################################


@njit(cache=True)
def _count_living(
    grid: np.ndarray, width: int, height: int, x: int, y: int, offsets: np.ndarray
) -> int:
    """
    Counts living neighbours of (x, y). Out-of-bounds neighbours are alive.
    """
    count = 0
    for i in range(offsets.shape[0]):
        nx = x + offsets[i, 0]
        ny = y + offsets[i, 1]
        if nx < 0 or nx >= width or ny < 0 or ny >= height:
            count += 1
        elif grid[nx, ny]:
            count += 1
    return count


@njit(cache=True)
def _apply_rules(
    grid: np.ndarray,
    offsets: np.ndarray,
    lower_birth: int,
    upper_birth: int,
    starvation: int,
    over_population: int,
) -> np.ndarray:
    """
    Computes one generation. Every cell reads the unmodified input grid and
    writes into a fresh buffer.
    """
    width, height = grid.shape
    out = np.zeros((width, height), dtype=np.bool_)
    for x in range(width):
        for y in range(height):
            n = _count_living(grid, width, height, x, y, offsets)
            if grid[x, y]:
                out[x, y] = starvation <= n and n <= over_population
            else:
                out[x, y] = lower_birth <= n and n <= upper_birth
    return out


###############################################################################
# Neighbourhoods
###############################################################################


class Neighbourhood(abc.ABC):
    """Base class. Subclasses decide which offsets lie within the range."""

    name = "base"

    def __init__(self, step_range: int = 1, width: int = 0, height: int = 0) -> None:
        self.step_range = 0
        self.width = width
        self.height = height
        self._offsets = np.zeros((0, 2), dtype=np.int64)
        self.set_range(step_range)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(step_range={self.step_range}, "
            f"width={self.width}, height={self.height})"
        )

    @property
    @abc.abstractmethod
    def neighbour_count(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def _contains(self, dx: int, dy: int) -> bool:
        raise NotImplementedError

    def update_boundaries(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def set_range(self, step_range: int) -> None:
        if step_range < 0:
            raise ValueError(f"step_range must be >= 0, got {step_range}")
        self.step_range = step_range
        s = step_range
        offsets = [
            (dx, dy)
            for dx in range(-s, s + 1)
            for dy in range(-s, s + 1)
            if (dx, dy) != (0, 0) and self._contains(dx, dy)
        ]
        self._offsets = np.array(offsets, dtype=np.int64).reshape(-1, 2)

    @property
    def offsets(self) -> np.ndarray:
        return self._offsets

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def count_living(self, grid: np.ndarray, x: int, y: int) -> int:
        return int(
            _count_living(grid, self.width, self.height, x, y, self._offsets)
        )

    def neighbour_coords(self, x: int, y: int) -> List[Tuple[int, int]]:
        """In-bounds neighbour coordinates of (x, y), x-major order."""
        return [
            (x + int(dx), y + int(dy))
            for dx, dy in self._offsets
            if self.in_bounds(x + int(dx), y + int(dy))
        ]

    def apply_rules(
        self,
        grid: np.ndarray,
        lower_birth: int,
        upper_birth: int,
        starvation: int,
        over_population: int,
    ) -> np.ndarray:
        if grid.shape != (self.width, self.height):
            raise ValueError(
                f"grid shape {grid.shape} does not match bounds "
                f"{(self.width, self.height)}"
            )
        return _apply_rules(
            np.ascontiguousarray(grid, dtype=np.bool_),
            self._offsets,
            lower_birth,
            upper_birth,
            starvation,
            over_population,
        )


class MooreNeighbourhood(Neighbourhood):
    """All cells within Chebyshev distance ``step_range``."""

    name = "moore"

    @property
    def neighbour_count(self) -> int:
        return (2 * self.step_range + 1) ** 2 - 1

    def _contains(self, dx: int, dy: int) -> bool:
        return max(abs(dx), abs(dy)) <= self.step_range


class VonNeumannNeighbourhood(Neighbourhood):
    """All cells within Manhattan distance ``step_range``."""

    name = "von_neumann"

    @property
    def neighbour_count(self) -> int:
        return sum(4 * i for i in range(1, self.step_range + 1))

    def _contains(self, dx: int, dy: int) -> bool:
        return abs(dx) + abs(dy) <= self.step_range


NEIGHBOURHOODS = {
    "moore": MooreNeighbourhood,
    "von_neumann": VonNeumannNeighbourhood,
    "vonneumann": VonNeumannNeighbourhood,
}


def make_neighbourhood(variant: str, step_range: int = 1) -> Neighbourhood:
    key = variant.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        cls = NEIGHBOURHOODS[key]
    except KeyError:
        raise ValueError(f"Unknown neighbourhood variant: {variant!r}") from None
    return cls(step_range)


__all__ = [
    "Neighbourhood",
    "MooreNeighbourhood",
    "VonNeumannNeighbourhood",
    "make_neighbourhood",
]
