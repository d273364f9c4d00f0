"""
Shared generation lifecycle for all grid generators.

Every generator follows the same contract:

1.  **Configure:** a config dataclass is validated in the constructor, so a bad
    record is rejected before any grid is allocated.
2.  **Prepare:** the per-run PRNG is seeded and the initial state is built.
3.  **Produce:** either ``generate()`` runs every step in one call (batch mode)
    or the host calls ``step()`` once per external tick (incremental mode).
    Both paths go through the same ``step()``, so they produce identical grids
    for the same seed.
4.  **Expose / Clear:** ``result()`` hands the grid out, ``clear()`` drops all
    run state.
"""

from __future__ import annotations

import abc
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from . import utils


@dataclass
class GeneratorConfig:
    """Fields common to every generator."""

    width: int = 64
    height: int = 64
    seed: Optional[str] = None
    use_custom_seed: bool = False
    incremental: bool = False
    step_interval: float = 0.0
    verbose: bool = False


class BaseGenerator(abc.ABC):
    model = "base"

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config
        self.validate()
        self.seed: Optional[str] = None
        self.rng: Optional[np.random.Generator] = None
        self._prepared = False

    # ------------------------------------------------------------------ config
    def validate(self) -> None:
        """Raise ValueError for a configuration that cannot be run."""
        cfg = self.config
        if cfg.width <= 0 or cfg.height <= 0:
            raise ValueError(
                f"width and height must be positive, got {cfg.width}x{cfg.height}"
            )
        if cfg.step_interval < 0:
            raise ValueError(f"step_interval must be >= 0, got {cfg.step_interval}")

    # --------------------------------------------------------------- lifecycle
    def prepare(self) -> None:
        """Seed the run PRNG and build the initial state."""
        self.clear()
        self.validate()
        self.seed = utils.resolve_seed(self.config.seed, self.config.use_custom_seed)
        self.rng = utils.make_rng(self.seed)
        self._prepare_initial_state()
        self._prepared = True

    def clear(self) -> None:
        self.rng = None
        self._prepared = False

    @property
    def is_prepared(self) -> bool:
        return self._prepared

    def _require_prepared(self) -> None:
        if not self._prepared:
            raise RuntimeError(f"{type(self).__name__}.prepare() must be called first")

    @abc.abstractmethod
    def _prepare_initial_state(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def step(self) -> bool:
        """
        Advance exactly one step. Returns True while more steps remain and
        False once the run is complete (a finished run is left untouched).
        """
        raise NotImplementedError

    @abc.abstractmethod
    def is_done(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def result(self) -> utils.GridResult:
        raise NotImplementedError

    # ------------------------------------------------------------------ public
    def run_incremental(
        self,
        on_step: Optional[Callable[["BaseGenerator"], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Drive ``step()`` at the configured cadence until the run is done."""
        self._require_prepared()
        while not self.is_done():
            if self.config.step_interval > 0:
                sleep(self.config.step_interval)
            self.step()
            if on_step is not None:
                on_step(self)

    def generate(
        self, on_step: Optional[Callable[["BaseGenerator"], None]] = None
    ) -> utils.GridResult:
        """Prepare and run to completion, in batch or incremental mode."""
        t_start = time.perf_counter()
        self.prepare()
        if self.config.incremental:
            self.run_incremental(on_step)
        else:
            while self.step():
                pass
        elapsed = time.perf_counter() - t_start

        if self.config.verbose:
            print(
                f"Generation completed: {self.model} "
                f"{self.config.width}x{self.config.height}, seed={self.seed!r} "
                f"in {elapsed:.2f}s"
            )

        result = self.result()
        result.ensure_meta()["time_elapsed"] = elapsed
        return result
