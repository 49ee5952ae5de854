# hypertorus/geometry/projector.py
"""
Per-frame 4D rotation and stereographic projection of a PointSet into a
caller-owned flat XYZ buffer.

For every source point p = (x, y, z, w) and time t:

    θ_xw = t · xw_speed                 θ_yz = t · yz_speed

    x' = x cos θ_xw − w sin θ_xw        y'' = y cos θ_yz − z sin θ_yz
    w' = x sin θ_xw + w cos θ_xw        z'' = y sin θ_yz + z cos θ_yz

    denom  = r − w'      (clamped to ε when |denom| < ε)
    P3     = (x', y'', z'') · r / denom

The rotation angle is a direct function of absolute time, so frames can be
requested in any order. Points are independent of each other; the kernel
spreads them over numba threads and the result does not depend on the
thread count.
"""

import math
import os

# Thread count is read when numba is first imported. Respect an explicit
# NUMBA_NUM_THREADS, else HYPERTORUS_NUMBA_NUM_THREADS, else one thread.
# If numba was already imported by the host process, neither variable set
# here has any effect; use numba.set_num_threads() instead.
if "NUMBA_NUM_THREADS" not in os.environ:
    os.environ["NUMBA_NUM_THREADS"] = os.environ.get("HYPERTORUS_NUMBA_NUM_THREADS", "1")

import numpy as np  # noqa: E402
from numba import njit, prange  # noqa: E402

from hypertorus.core.constants import STEREO_EPSILON  # noqa: E402
from hypertorus.core.errors import InvalidArgument  # noqa: E402

__all__ = [
    "FrameProjector",
    "max_projected_radius",
    "project",
    "rotate_4d",
    "stereographic",
]

# =============================================================================
# CORE NUMERICAL KERNELS (JIT-COMPILED)
# =============================================================================


@njit(cache=True)
def _safe_denominator(r: float, w: float, eps: float) -> float:
    """Magnitude clamp: any |r − w| below eps becomes +eps."""
    denom = r - w
    if abs(denom) < eps:
        return eps
    return denom


@njit(parallel=True, fastmath=True, cache=True)
def project_kernel(
    points: np.ndarray,
    cos_xw: float,
    sin_xw: float,
    cos_yz: float,
    sin_yz: float,
    r: float,
    eps: float,
    out: np.ndarray,
) -> np.ndarray:
    """Rotate (XW, then YZ) and project every point into the flat buffer `out`.

    Parameters
    ----------
    points : (N, 4) ndarray
        Source points, columns x, y, z, w.
    cos_xw, sin_xw, cos_yz, sin_yz : float
        Precomputed trig of the two rotation angles.
    r : float
        Projection pole distance.
    eps : float
        Denominator clamp threshold.
    out : (3N,) ndarray
        Output buffer, interleaved x, y, z.
    """
    n = points.shape[0]
    for i in prange(n):
        x = points[i, 0]
        y = points[i, 1]
        z = points[i, 2]
        w = points[i, 3]

        # XW plane
        x1 = x * cos_xw - w * sin_xw
        w1 = x * sin_xw + w * cos_xw

        # YZ plane
        y2 = y * cos_yz - z * sin_yz
        z2 = y * sin_yz + z * cos_yz

        factor = r / _safe_denominator(r, w1, eps)

        j = 3 * i
        out[j] = x1 * factor
        out[j + 1] = y2 * factor
        out[j + 2] = z2 * factor
    return out


@njit(parallel=True, fastmath=True, cache=True)
def rotate_kernel(points: np.ndarray, cos_xw: float, sin_xw: float,
                  cos_yz: float, sin_yz: float, out: np.ndarray) -> np.ndarray:
    """Apply the XW then YZ rotation, writing (N, 4) results into `out`."""
    n = points.shape[0]
    for i in prange(n):
        x = points[i, 0]
        y = points[i, 1]
        z = points[i, 2]
        w = points[i, 3]
        out[i, 0] = x * cos_xw - w * sin_xw
        out[i, 1] = y * cos_yz - z * sin_yz
        out[i, 2] = y * sin_yz + z * cos_yz
        out[i, 3] = x * sin_xw + w * cos_xw
    return out


@njit(parallel=True, fastmath=True, cache=True)
def stereographic_kernel(points: np.ndarray, r: float, eps: float, out: np.ndarray) -> np.ndarray:
    """Project (N, 4) points from the pole (0, 0, 0, r) onto w = 0."""
    n = points.shape[0]
    for i in prange(n):
        factor = r / _safe_denominator(r, points[i, 3], eps)
        out[i, 0] = points[i, 0] * factor
        out[i, 1] = points[i, 1] * factor
        out[i, 2] = points[i, 2] * factor
    return out


# =============================================================================
# PYTHON API
# =============================================================================


def _as_points(points) -> np.ndarray:
    points = np.ascontiguousarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 4:
        raise InvalidArgument(f"Expected an (N, 4) array of 4D points, got shape {points.shape}")
    return points


_BUFFER_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


def _check_buffer(out, n: int) -> np.ndarray:
    """Validate the output buffer and return its flat view. Never writes."""
    if not isinstance(out, np.ndarray):
        raise InvalidArgument(f"Output buffer must be a numpy array, got {type(out).__name__}")
    if out.dtype not in _BUFFER_DTYPES or not out.dtype.isnative:
        raise InvalidArgument(f"Output buffer must be native float32 or float64, got dtype {out.dtype}")
    if out.size != 3 * n:
        raise InvalidArgument(f"Output buffer has {out.size} elements, expected 3 x {n} = {3 * n}")
    if not out.flags.c_contiguous or not out.flags.writeable:
        raise InvalidArgument("Output buffer must be C-contiguous and writeable")
    return out.reshape(-1)


def rotate_4d(points, theta_xw: float, theta_yz: float) -> np.ndarray:
    """Return a rotated copy of (N, 4) points (XW plane first, then YZ)."""
    points = _as_points(points)
    out = np.empty_like(points)
    return rotate_kernel(points, math.cos(theta_xw), math.sin(theta_xw),
                         math.cos(theta_yz), math.sin(theta_yz), out)


def stereographic(points, r: float, eps: float = STEREO_EPSILON) -> np.ndarray:
    """Return the (N, 3) stereographic image of (N, 4) points."""
    points = _as_points(points)
    out = np.empty((points.shape[0], 3), dtype=np.float64)
    return stereographic_kernel(points, float(r), float(eps), out)


def project(point_set, elapsed_time: float, xw_speed: float, yz_speed: float,
            projection_distance: float, out: np.ndarray, eps: float = STEREO_EPSILON) -> np.ndarray:
    """
    Rotate and project every point of `point_set` into `out`.

    Args:
        point_set (PointSet): Source points.
        elapsed_time (float): Absolute simulation time.
        xw_speed (float): XW-plane angular velocity.
        yz_speed (float): YZ-plane angular velocity.
        projection_distance (float): Pole distance r.
        out (ndarray): Caller-owned buffer of exactly 3·N elements. Must be a
            C-contiguous, writeable numpy array of native float32 or
            float64; lists and other sequences are rejected even when
            their length is right.
        eps (float): Denominator clamp threshold.

    Returns:
        ndarray: `out`, filled in place.

    Raises:
        InvalidArgument: If `out` does not match the point set or is not
            a buffer of the kind described above. `out` is left untouched.
    """
    flat = _check_buffer(out, len(point_set))
    theta_xw = elapsed_time * xw_speed
    theta_yz = elapsed_time * yz_speed
    project_kernel(
        point_set.points,
        math.cos(theta_xw), math.sin(theta_xw),
        math.cos(theta_yz), math.sin(theta_yz),
        float(projection_distance), float(eps),
        flat,
    )
    return out


def max_projected_radius(r: float, eps: float = STEREO_EPSILON) -> float:
    """Worst-case distance from the origin of any projected torus point.

    Rotated points keep x²+y²+z²+w² = 2, so the projected numerator is at most
    √2 and the clamp keeps |denom| ≥ eps.
    """
    if r > 1.0:
        return math.sqrt(2.0) * r / max(r - 1.0, eps)
    return math.sqrt(2.0) * abs(r) / eps


class FrameProjector:
    """Binds a PointSet so per-frame calls only pass time, config and buffer."""
    def __init__(self, point_set, eps: float = STEREO_EPSILON):
        self.point_set = point_set
        self.eps = eps

    def __len__(self):
        return len(self.point_set)

    def project(self, elapsed_time: float, config, out: np.ndarray) -> np.ndarray:
        return project(
            self.point_set, elapsed_time,
            config.xw_speed, config.yz_speed, config.projection_distance,
            out, eps=self.eps,
        )
