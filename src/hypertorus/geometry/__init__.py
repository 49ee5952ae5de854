"""
Geometry engine: torus point sets, 4D rotation and stereographic projection.
"""

from .point_set import Point4D, PointSet, PointSetGenerator, generate_point_set
from .projector import FrameProjector, max_projected_radius, project, rotate_4d, stereographic
from .scene import HyperTorusScene

__all__ = [
    "FrameProjector",
    "HyperTorusScene",
    "Point4D",
    "PointSet",
    "PointSetGenerator",
    "generate_point_set",
    "max_projected_radius",
    "project",
    "rotate_4d",
    "stereographic",
]
