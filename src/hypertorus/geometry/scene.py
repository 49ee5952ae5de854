# hypertorus/geometry/scene.py
"""
HyperTorusScene: caller-side driver that owns the cached PointSet and the
position buffer a renderer reads each frame.

The point set and buffer are rebuilt only when the structural key
(particle_count, color_scheme) of the config changes; speeds and
projection distance are read fresh on every step.
"""

from typing import Optional

import numpy as np

from hypertorus.core.config import SimulationConfig, StructuralKey
from hypertorus.core.logging import logger
from hypertorus.geometry.point_set import PointSet, PointSetGenerator
from hypertorus.geometry.projector import FrameProjector

__all__ = ["HyperTorusScene"]


class HyperTorusScene:
    def __init__(self, config: Optional[SimulationConfig] = None, seed: Optional[int] = None):
        self.generator = PointSetGenerator(seed=seed)
        self.config = config if config is not None else SimulationConfig()
        self.generation = 0
        self._key: Optional[StructuralKey] = None
        self._projector: Optional[FrameProjector] = None
        self._positions: Optional[np.ndarray] = None
        self._regenerate()

    # --- Structural cache ---

    def _regenerate(self):
        key = self.config.structural_key
        point_set = self.generator.generate(key.particle_count, key.color_scheme)
        self._projector = FrameProjector(point_set)
        self._positions = point_set.new_position_buffer()
        self._key = key
        self.generation += 1
        logger.info(
            f"Regenerated point set #{self.generation}: "
            f"{key.particle_count} points, color_scheme={key.color_scheme.value}"
        )

    def update_config(self, config: SimulationConfig) -> bool:
        """
        Install a new config. Returns True if the point set was regenerated.
        """
        self.config = config
        if config.structural_key != self._key:
            self._regenerate()
            return True
        return False

    # --- Per-frame ---

    def step(self, elapsed_time: float) -> np.ndarray:
        """Project the current point set at `elapsed_time` into the persistent buffer."""
        return self._projector.project(elapsed_time, self.config, self._positions)

    # --- Accessors ---

    @property
    def point_set(self) -> PointSet:
        return self._projector.point_set

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def colors(self) -> np.ndarray:
        return self.point_set.color_buffer()

    @property
    def render_hints(self) -> dict:
        return {"opacity": self.config.opacity, "point_size": self.config.point_size}
