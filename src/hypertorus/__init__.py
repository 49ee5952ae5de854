"""
hypertorus: point-cloud Clifford torus, rotated in 4D and stereographically
projected to 3D.
"""

__version__ = "0.1.0"

from hypertorus.core import ColorScheme, InvalidArgument, SimulationConfig, StructuralKey
from hypertorus.geometry import (
    FrameProjector,
    HyperTorusScene,
    Point4D,
    PointSet,
    PointSetGenerator,
    generate_point_set,
    project,
)

__all__ = [
    "__version__",
    "ColorScheme",
    "FrameProjector",
    "HyperTorusScene",
    "InvalidArgument",
    "Point4D",
    "PointSet",
    "PointSetGenerator",
    "SimulationConfig",
    "StructuralKey",
    "generate_point_set",
    "project",
]
