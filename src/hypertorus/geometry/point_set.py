# hypertorus/geometry/point_set.py
"""
Source point sets on the Clifford torus S¹×S¹ ⊂ R⁴.

Each point is generated from two angles (u, v) as

    (x, y, z, w) = (cos u, sin u, cos v, sin v)

so x²+y² = z²+w² = 1 and every point lies on the unit-radius-per-circle
Clifford torus (a scaled copy of the one inside the unit 3-sphere). The
point color is fixed at generation time and depends on u only.

A PointSet is immutable. When the particle count or color scheme changes the
caller throws the whole set away and generates a new one.
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Union

import numpy as np

from hypertorus.core.constants import TWO_PI
from hypertorus.core.enums import ColorScheme
from hypertorus.core.errors import InvalidArgument
from hypertorus.core.logging import logger

__all__ = [
    "Point4D",
    "PointSet",
    "PointSetGenerator",
    "generate_point_set",
]


class Point4D(NamedTuple):
    x: float
    y: float
    z: float
    w: float
    u: float
    v: float


def _coerce_scheme(color_scheme: Union[ColorScheme, str]) -> ColorScheme:
    try:
        return ColorScheme(color_scheme)
    except ValueError:
        valid = ", ".join(s.value for s in ColorScheme)
        raise InvalidArgument(f"Unknown color scheme {color_scheme!r} (expected one of: {valid})") from None


def _check_count(particle_count) -> int:
    if isinstance(particle_count, (bool, np.bool_)) or not isinstance(particle_count, (int, np.integer)):
        raise InvalidArgument(f"particle_count must be an integer, got {type(particle_count).__name__}")
    if particle_count <= 0:
        raise InvalidArgument(f"particle_count must be positive, got {particle_count}")
    return int(particle_count)


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class PointSet:
    """
    N torus points with their generating angles and static colors.

    Attributes:
        points (ndarray): (N, 4) float64, columns x, y, z, w.
        angles (ndarray): (N, 2) float64, columns u, v in [0, 2π).
        colors (ndarray): (N, 3) float32 RGB in [0, 1].
        color_scheme (ColorScheme): Palette the colors were built from.
    """
    points: np.ndarray
    angles: np.ndarray
    colors: np.ndarray
    color_scheme: ColorScheme

    def __post_init__(self):
        n = self.points.shape[0]
        if self.points.shape != (n, 4) or self.angles.shape != (n, 2) or self.colors.shape != (n, 3):
            raise InvalidArgument(
                f"Inconsistent point set shapes: points={self.points.shape}, "
                f"angles={self.angles.shape}, colors={self.colors.shape}"
            )
        object.__setattr__(self, "points", _frozen(np.ascontiguousarray(self.points, dtype=np.float64)))
        object.__setattr__(self, "angles", _frozen(np.ascontiguousarray(self.angles, dtype=np.float64)))
        object.__setattr__(self, "colors", _frozen(np.ascontiguousarray(self.colors, dtype=np.float32)))

    @classmethod
    def from_angles(cls, u, v, color_scheme: Union[ColorScheme, str] = ColorScheme.CYBER) -> "PointSet":
        """Build a point set from explicit generating angles."""
        scheme = _coerce_scheme(color_scheme)
        u = np.atleast_1d(np.asarray(u, dtype=np.float64))
        v = np.atleast_1d(np.asarray(v, dtype=np.float64))
        if u.ndim != 1 or u.shape != v.shape:
            raise InvalidArgument(f"u and v must be 1-D and equal length, got {u.shape} and {v.shape}")
        _check_count(u.shape[0])

        cos_u = np.cos(u)
        points = np.column_stack((cos_u, np.sin(u), np.cos(v), np.sin(v)))

        # Plain RGB lerp on the first angle only.
        color_a, color_b = scheme.endpoints()
        t = (cos_u + 1.0) / 2.0
        colors = color_a + (color_b - color_a) * t[:, np.newaxis]

        return cls(
            points=points,
            angles=np.column_stack((u, v)),
            colors=colors,
            color_scheme=scheme,
        )

    # --- Sequence protocol ---

    def __len__(self) -> int:
        return self.points.shape[0]

    def __getitem__(self, i: int) -> Point4D:
        x, y, z, w = (float(c) for c in self.points[i])
        u, v = (float(a) for a in self.angles[i])
        return Point4D(x, y, z, w, u, v)

    def __iter__(self) -> Iterator[Point4D]:
        for i in range(len(self)):
            yield self[i]

    # --- Renderer-facing buffers ---

    def color_buffer(self) -> np.ndarray:
        """Flat interleaved RGB buffer (3N float32, point i at offset 3i)."""
        return self.colors.reshape(-1)

    def new_position_buffer(self, dtype=np.float32) -> np.ndarray:
        """Zeroed flat XYZ buffer sized for this point set."""
        return np.zeros(3 * len(self), dtype=dtype)

    def max_manifold_error(self) -> float:
        """Largest deviation of x²+y² or z²+w² from 1 over all points."""
        p = self.points
        r_xy = p[:, 0] ** 2 + p[:, 1] ** 2
        r_zw = p[:, 2] ** 2 + p[:, 3] ** 2
        return float(max(np.max(np.abs(r_xy - 1.0)), np.max(np.abs(r_zw - 1.0))))


class PointSetGenerator:
    """
    Samples point sets uniformly in (u, v).

    There is no deduplication or spacing guarantee; points may cluster or
    coincide since the torus is sampled, not meshed.
    """
    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def generate(self, particle_count: int, color_scheme: Union[ColorScheme, str] = ColorScheme.CYBER) -> PointSet:
        n = _check_count(particle_count)
        scheme = _coerce_scheme(color_scheme)

        u = self.rng.random(n) * TWO_PI
        v = self.rng.random(n) * TWO_PI
        point_set = PointSet.from_angles(u, v, scheme)

        logger.debug(f"Generated {n} torus points (color_scheme={scheme.value})")
        return point_set


def generate_point_set(particle_count: int, color_scheme: Union[ColorScheme, str] = ColorScheme.CYBER,
                       seed: Optional[int] = None) -> PointSet:
    return PointSetGenerator(seed=seed).generate(particle_count, color_scheme)
