"""Tests for hypertorus.geometry.projector

Covers the rotation isometry, the zero-time identity, the pole clamp, the
output-buffer contract and the two hand-worked single-point scenarios.
"""

import math
import os
import subprocess
import sys
import textwrap

import numpy as np
import pytest

from hypertorus.core.config import SimulationConfig
from hypertorus.core.constants import STEREO_EPSILON
from hypertorus.core.enums import ColorScheme
from hypertorus.core.errors import InvalidArgument
from hypertorus.geometry.point_set import PointSet, PointSetGenerator
from hypertorus.geometry.projector import (
    FrameProjector,
    max_projected_radius,
    project,
    rotate_4d,
    stereographic,
)


@pytest.fixture
def point_set():
    return PointSetGenerator(seed=42).generate(1500, ColorScheme.CYBER)


def _reference_projection(points, t, xw_speed, yz_speed, r, eps=STEREO_EPSILON):
    """Straight numpy transcription of the per-point formulas."""
    a, b = t * xw_speed, t * yz_speed
    x, y, z, w = points.T
    x1 = x * np.cos(a) - w * np.sin(a)
    w1 = x * np.sin(a) + w * np.cos(a)
    y2 = y * np.cos(b) - z * np.sin(b)
    z2 = y * np.sin(b) + z * np.cos(b)
    denom = r - w1
    denom = np.where(np.abs(denom) < eps, eps, denom)
    factor = r / denom
    return np.column_stack((x1 * factor, y2 * factor, z2 * factor)).reshape(-1)


def test_single_point_at_time_zero():
    # (u, v) = (0, 0) -> (1, 0, 1, 0); r = 2.5 -> factor 1
    ps = PointSet.from_angles([0.0], [0.0], ColorScheme.CYBER)
    out = np.zeros(3, dtype=np.float64)
    project(ps, 0.0, 0.5, 0.2, 2.5, out)
    assert out == pytest.approx([1.0, 0.0, 1.0])


def test_single_point_after_quarter_turn_in_xw():
    # θ_xw = π/2: (x', w') = (0, 1); denom = 1.5; factor = 2.5 / 1.5
    ps = PointSet.from_angles([0.0], [0.0], ColorScheme.CYBER)
    out = np.zeros(3, dtype=np.float64)
    project(ps, 1.0, math.pi / 2, 0.0, 2.5, out)
    assert out == pytest.approx([0.0, 0.0, 2.5 / 1.5], abs=1e-12)


def test_matches_reference_formulas(point_set):
    out = point_set.new_position_buffer(dtype=np.float64)
    project(point_set, 3.7, -1.3, 0.9, 2.0, out)
    expected = _reference_projection(point_set.points, 3.7, -1.3, 0.9, 2.0)
    assert np.allclose(out, expected, rtol=1e-10, atol=1e-12)


def test_float32_buffer_is_filled(point_set):
    out = point_set.new_position_buffer()
    project(point_set, 1.25, 0.5, 0.2, 2.5, out)
    expected = _reference_projection(point_set.points, 1.25, 0.5, 0.2, 2.5)
    assert np.allclose(out, expected, rtol=1e-5, atol=1e-6)


@pytest.mark.parametrize("theta_xw, theta_yz", [(0.3, 1.9), (math.pi, -2.2), (5.0, 0.0), (0.0, 4.4)])
def test_rotation_preserves_norm(point_set, theta_xw, theta_yz):
    rotated = rotate_4d(point_set.points, theta_xw, theta_yz)
    assert np.allclose(np.sum(rotated ** 2, axis=1), 2.0, atol=1e-9)


def test_rotation_keeps_points_on_the_torus_planes(point_set):
    # XW and YZ rotations are isometries of R⁴; the rotated set stays on the
    # 3-sphere of radius √2 even though it leaves the original circles.
    rotated = rotate_4d(point_set.points, 0.7, 0.0)
    assert np.allclose(rotated[:, 1:3], point_set.points[:, 1:3])
    assert np.allclose(rotated[:, 0] ** 2 + rotated[:, 3] ** 2,
                       point_set.points[:, 0] ** 2 + point_set.points[:, 3] ** 2)


def test_rotation_by_zero_is_identity(point_set):
    assert np.array_equal(rotate_4d(point_set.points, 0.0, 0.0), point_set.points)


@pytest.mark.parametrize("t, xw_speed, yz_speed", [(0.0, 1.7, -0.4), (12.0, 0.0, 0.0)])
def test_zero_angle_projects_unrotated_points(point_set, t, xw_speed, yz_speed):
    out = point_set.new_position_buffer(dtype=np.float64)
    project(point_set, t, xw_speed, yz_speed, 2.5, out)
    assert np.allclose(out.reshape(-1, 3), stereographic(point_set.points, 2.5), rtol=0, atol=1e-12)


def test_output_is_finite_and_bounded_for_all_angles(point_set):
    r = 1.5
    bound = max_projected_radius(r)
    out = point_set.new_position_buffer(dtype=np.float64)
    for theta_xw in np.linspace(0.0, 2 * np.pi, 9, endpoint=False):
        for theta_yz in np.linspace(0.0, 2 * np.pi, 7, endpoint=False):
            project(point_set, 1.0, theta_xw, theta_yz, r, out)
            assert np.all(np.isfinite(out))
            assert np.max(np.linalg.norm(out.reshape(-1, 3), axis=1)) <= bound + 1e-9


def test_point_on_the_pole_is_clamped():
    # (u, v) = (π/2, π/2) -> (0, 1, 0, 1); with r = 1 the denominator is exactly 0.
    ps = PointSet.from_angles([np.pi / 2], [np.pi / 2], ColorScheme.CYBER)
    out = np.zeros(3)
    project(ps, 0.0, 0.0, 0.0, 1.0, out)
    assert np.all(np.isfinite(out))
    assert out[1] == pytest.approx(1.0 / STEREO_EPSILON)


def test_near_pole_uses_positive_magnitude_clamp():
    # r − w = −0.005: below ε in magnitude, replaced by +ε rather than −ε.
    ps = PointSet.from_angles([np.pi / 2], [np.pi / 2], ColorScheme.CYBER)
    projected = stereographic(ps.points, 0.995)
    assert projected[0, 1] == pytest.approx(0.995 / STEREO_EPSILON)


def test_clamp_threshold_is_tunable():
    ps = PointSet.from_angles([np.pi / 2], [np.pi / 2], ColorScheme.CYBER)
    out = np.zeros(3)
    project(ps, 0.0, 0.0, 0.0, 1.0, out, eps=0.1)
    assert out[1] == pytest.approx(10.0)


@pytest.mark.parametrize("size", [0, 3 * 1500 - 1, 3 * 1500 + 3, 1500])
def test_wrong_buffer_size_raises_without_writing(point_set, size):
    out = np.full(size, 7.0, dtype=np.float32)
    before = out.tobytes()
    with pytest.raises(InvalidArgument):
        project(point_set, 1.0, 0.5, 0.2, 2.5, out)
    assert out.tobytes() == before


def test_non_array_buffer_is_rejected(point_set):
    # Right length, wrong container: only numpy float buffers are written to.
    out = [0.0] * (3 * len(point_set))
    with pytest.raises(InvalidArgument):
        project(point_set, 1.0, 0.5, 0.2, 2.5, out)
    assert not any(out)


def test_integer_buffer_is_rejected(point_set):
    out = np.zeros(3 * len(point_set), dtype=np.int32)
    with pytest.raises(InvalidArgument):
        project(point_set, 1.0, 0.5, 0.2, 2.5, out)


@pytest.mark.parametrize("dtype", [
    np.float16,
    np.dtype(">f8"),
    pytest.param(np.longdouble, marks=pytest.mark.skipif(
        np.dtype(np.longdouble).itemsize == 8, reason="longdouble is float64 on this platform")),
])
def test_unsupported_float_buffer_is_rejected_untouched(point_set, dtype):
    out = np.full(3 * len(point_set), 7.0, dtype=dtype)
    before = out.tobytes()
    with pytest.raises(InvalidArgument, match="native float32 or float64"):
        project(point_set, 1.0, 0.5, 0.2, 2.5, out)
    assert out.tobytes() == before


def test_non_contiguous_buffer_is_rejected(point_set):
    backing = np.zeros(6 * len(point_set))
    with pytest.raises(InvalidArgument):
        project(point_set, 1.0, 0.5, 0.2, 2.5, backing[::2])
    assert not backing.any()


def test_shaped_buffer_of_correct_size_is_accepted(point_set):
    out = np.zeros((len(point_set), 3))
    flat = point_set.new_position_buffer(dtype=np.float64)
    project(point_set, 2.0, 0.5, 0.2, 2.5, out)
    project(point_set, 2.0, 0.5, 0.2, 2.5, flat)
    assert np.array_equal(out.reshape(-1), flat)


def test_projection_is_deterministic(point_set):
    a = point_set.new_position_buffer(dtype=np.float64)
    b = point_set.new_position_buffer(dtype=np.float64)
    project(point_set, 4.2, 1.1, -0.3, 3.0, a)
    project(point_set, 4.2, 1.1, -0.3, 3.0, b)
    assert np.array_equal(a, b)


def test_time_can_run_backwards(point_set):
    # Angles come from absolute time, so rewinding reproduces earlier frames.
    first = point_set.new_position_buffer(dtype=np.float64)
    again = point_set.new_position_buffer(dtype=np.float64)
    project(point_set, 1.0, 0.5, 0.2, 2.5, first)
    project(point_set, 9.0, 0.5, 0.2, 2.5, again)
    project(point_set, 1.0, 0.5, 0.2, 2.5, again)
    assert np.array_equal(first, again)


def test_points_are_projected_independently(point_set):
    order = np.random.default_rng(3).permutation(len(point_set))
    shuffled = PointSet.from_angles(point_set.angles[order, 0], point_set.angles[order, 1], ColorScheme.CYBER)

    out = point_set.new_position_buffer(dtype=np.float64)
    out_shuffled = shuffled.new_position_buffer(dtype=np.float64)
    project(point_set, 2.5, 0.8, -1.2, 2.0, out)
    project(shuffled, 2.5, 0.8, -1.2, 2.0, out_shuffled)
    assert np.allclose(out.reshape(-1, 3)[order], out_shuffled.reshape(-1, 3), rtol=1e-12, atol=1e-12)


def test_frame_projector_reads_speeds_from_config(point_set):
    config = SimulationConfig(xw_speed=-0.7, yz_speed=1.4, projection_distance=3.0, particle_count=1500)
    via_config = point_set.new_position_buffer(dtype=np.float64)
    direct = point_set.new_position_buffer(dtype=np.float64)

    projector = FrameProjector(point_set)
    assert len(projector) == 1500
    projector.project(2.0, config, via_config)
    project(point_set, 2.0, -0.7, 1.4, 3.0, direct)
    assert np.array_equal(via_config, direct)


def test_max_projected_radius():
    assert max_projected_radius(2.5) == pytest.approx(math.sqrt(2.0) * 2.5 / 1.5)
    # Inside the clamp band the bound is set by ε.
    assert max_projected_radius(1.005) == pytest.approx(math.sqrt(2.0) * 1.005 / STEREO_EPSILON)
    assert max_projected_radius(0.5) == pytest.approx(math.sqrt(2.0) * 0.5 / STEREO_EPSILON)


_THREADED_PROJECTION = textwrap.dedent("""
    import sys

    import numpy as np
    import numba

    from hypertorus.geometry.point_set import PointSetGenerator
    from hypertorus.geometry.projector import project

    point_set = PointSetGenerator(seed=99).generate(50000, "cyber")
    out = point_set.new_position_buffer(dtype=np.float64)
    project(point_set, 3.3, 0.5, -1.1, 1.8, out)
    np.save(sys.argv[1], out)
    print(numba.get_num_threads())
""")


def _project_with_threads(threads, path):
    env = {k: v for k, v in os.environ.items() if k != "NUMBA_NUM_THREADS"}
    env["HYPERTORUS_NUMBA_NUM_THREADS"] = str(threads)
    result = subprocess.run(
        [sys.executable, "-c", _THREADED_PROJECTION, str(path)],
        env=env, capture_output=True, text=True, check=True,
    )
    return int(result.stdout.strip().splitlines()[-1]), np.load(path)


def test_output_does_not_depend_on_thread_count(tmp_path):
    single_threads, single = _project_with_threads(1, tmp_path / "one.npy")
    multi_threads, multi = _project_with_threads(3, tmp_path / "three.npy")
    assert (single_threads, multi_threads) == (1, 3)
    assert np.array_equal(single, multi)
