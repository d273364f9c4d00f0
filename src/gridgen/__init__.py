"""
Procedural Grid Generation Library

This package provides three grid generators sharing one lifecycle
(configure, prepare, step or generate, result, clear):
- CellularAutomaton: birth/survival rule over Moore or von Neumann neighbourhoods
- DrunkardsWalk: walker-based carver with bias, levy flights, rooms and breeding
- TerrainGenerator: octave gradient-noise height maps
"""

from .cellular import CAConfig, CellularAutomaton
from .drunkards_walk import DrunkardsWalk, WalkConfig
from .terrain import NoiseConfig, TerrainGenerator
from .neighbourhood import MooreNeighbourhood, VonNeumannNeighbourhood, make_neighbourhood
from .walk_schemes import (
    EightWaysScheme,
    HexagonalScheme,
    TraditionalScheme,
    make_walk_scheme,
)
from .walker import Walker
from .rooms import Room, RoomSpawner
from .noise import NoiseEngine
from . import utils

__all__ = [
    # Generators
    "CellularAutomaton",
    "DrunkardsWalk",
    "TerrainGenerator",
    # Configuration classes
    "CAConfig",
    "WalkConfig",
    "NoiseConfig",
    # Strategies and building blocks
    "MooreNeighbourhood",
    "VonNeumannNeighbourhood",
    "make_neighbourhood",
    "TraditionalScheme",
    "EightWaysScheme",
    "HexagonalScheme",
    "make_walk_scheme",
    "Walker",
    "Room",
    "RoomSpawner",
    "NoiseEngine",
    # Utilities
    "utils",
]
