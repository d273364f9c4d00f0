from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Room:
    """Room template: footprint size and spawn probability."""

    width: int
    height: int
    probability: float


def as_room(template: Room | dict | Sequence) -> Room:
    """Coerce a template given as a Room, a dict or a (w, h, p) triple."""
    if isinstance(template, Room):
        room = template
    elif isinstance(template, dict):
        room = Room(**template)
    else:
        width, height, probability = template
        room = Room(int(width), int(height), float(probability))
    if room.width <= 0 or room.height <= 0:
        raise ValueError(f"room dimensions must be positive, got {room}")
    if not 0.0 <= room.probability <= 1.0:
        raise ValueError(f"room probability must be in [0, 1], got {room}")
    return room


def room_extent(size: int) -> range:
    """
    Offsets covered along one axis by a room of ``size`` centred on a walker.

    The upper bound is ``size // 2`` when ``size / 2`` is an even number and
    one more otherwise, so sizes 4 and 8 are exact while 2 and 6 grow by one.
    """
    half = size // 2
    upper = half if (size / 2) % 2 == 0 else half + 1
    return range(-half, upper)


class RoomSpawner:
    """
    Stamps room footprints around a walker.

    Templates are sorted by probability, highest first. A spawn rolls
    ``spawn_chance`` once, then a single uniform draw is compared against
    each template's own probability in order; the first template whose
    probability exceeds the draw is stamped.
    """

    def __init__(self, rooms: Iterable[Room | dict | Sequence], spawn_chance: float) -> None:
        self.rooms: List[Room] = sorted(
            (as_room(r) for r in rooms), key=lambda r: r.probability, reverse=True
        )
        self.spawn_chance = spawn_chance

    def select(self, roll: float) -> Optional[Room]:
        for room in self.rooms:
            if roll < room.probability:
                return room
        return None

    def footprint(
        self, room: Room, x: int, y: int, width: int, height: int
    ) -> List[Tuple[int, int]]:
        """In-bounds tiles covered by ``room`` centred on (x, y)."""
        tiles = []
        for dx in room_extent(room.width):
            for dy in room_extent(room.height):
                tx = x + dx
                ty = y + dy
                if 0 <= tx < width and 0 <= ty < height:
                    tiles.append((tx, ty))
        return tiles

    def try_spawn(
        self, rng: np.random.Generator, x: int, y: int, width: int, height: int
    ) -> Optional[Tuple[Room, List[Tuple[int, int]]]]:
        if not rng.random() < self.spawn_chance:
            return None
        room = self.select(rng.random())
        if room is None:
            return None
        return room, self.footprint(room, x, y, width, height)


__all__ = ["Room", "RoomSpawner", "as_room", "room_extent"]
