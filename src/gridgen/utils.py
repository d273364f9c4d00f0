# src/gridgen/utils.py
from __future__ import annotations

import hashlib
import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None  # type: ignore


@dataclass
class GridResult:
    """Common container for generator outputs."""

    grid: Optional[np.ndarray] = None
    history: Optional[List[np.ndarray]] = None
    walkers: Optional[List[Tuple[int, int, bool, bool, bool]]] = None
    meta: Optional[Dict[str, Any]] = None

    def ensure_meta(self) -> Dict[str, Any]:
        if self.meta is None:
            self.meta = {}
        return self.meta


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def resolve_seed(seed: Optional[str], use_custom_seed: bool) -> str:
    """
    Return the seed string for a run: the caller's seed when a custom seed is
    requested and non-empty, otherwise a timestamp.
    """
    if not use_custom_seed or not seed:
        return now_str()
    return seed


def seed_to_int(seed: str) -> int:
    """
    Stable 64-bit integer for a seed string.

    Python's built-in hash() is salted per process, so a digest is used
    instead to keep runs reproducible across interpreters.
    """
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "little")


def make_rng(seed: str) -> np.random.Generator:
    """Create the PRNG owned by one generation run."""
    return np.random.default_rng(seed_to_int(seed))


def check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}")


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load generator parameters from JSON or TOML.
    """
    path = str(path)
    with open(path, "rb") as fh:
        data = fh.read()
    suffix = Path(path).suffix.lower()
    if suffix in {".json", ""}:
        return json.loads(data.decode("utf-8"))
    if suffix in {".toml", ".tml"}:
        if tomllib is None:
            raise RuntimeError("tomllib is unavailable; cannot parse TOML files")
        return tomllib.loads(data.decode("utf-8"))
    raise ValueError(f"Unsupported parameter file format: {suffix}")
