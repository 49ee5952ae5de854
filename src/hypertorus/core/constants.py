"""
Numerical constants and defaults for the hypertorus geometry engine.

Exports:
    - STEREO_EPSILON: Magnitude below which the projection denominator is clamped.
    - MANIFOLD_TOLERANCE: Tolerance for the x²+y² = z²+w² = 1 invariant.
    - TWO_PI: Upper (exclusive) bound of the generating angles.
    - DEFAULTS: Default SimulationConfig values (snake_case field names).
    - XW_SPEED_RANGE, YZ_SPEED_RANGE, PROJECTION_DISTANCE_RANGE, OPACITY_RANGE:
      (min, max, step) of the presentation-layer sliders.
    - COLOR_SCHEME_ENDPOINTS: 8-bit RGB endpoint pairs keyed by scheme name.
"""

import math
from typing import Dict, Tuple

# --- Projection ---
STEREO_EPSILON = 0.01
MANIFOLD_TOLERANCE = 1e-9
TWO_PI = 2.0 * math.pi

# --- Defaults (match the stock scene) ---
DEFAULTS = {
    "xw_speed": 0.5,
    "yz_speed": 0.2,
    "projection_distance": 2.5,
    "particle_count": 15000,
    "opacity": 0.6,
    "point_size": 0.05,
    "color_scheme": "cyber",
}

# --- Slider ranges: (min, max, step) ---
XW_SPEED_RANGE = (-2.0, 2.0, 0.01)
YZ_SPEED_RANGE = (-2.0, 2.0, 0.01)
PROJECTION_DISTANCE_RANGE = (1.1, 5.0, 0.1)
OPACITY_RANGE = (0.1, 1.0, 0.05)

# --- Palettes ---
COLOR_SCHEME_ENDPOINTS: Dict[str, Tuple[Tuple[int, int, int], Tuple[int, int, int]]] = {
    "cyber": ((0, 255, 255), (255, 0, 255)),          # cyan -> magenta
    "thermal": ((255, 170, 0), (0, 0, 255)),          # orange -> blue
    "monochrome": ((255, 255, 255), (51, 51, 51)),    # white -> dark gray
}

__all__ = [
    "STEREO_EPSILON",
    "MANIFOLD_TOLERANCE",
    "TWO_PI",
    "DEFAULTS",
    "XW_SPEED_RANGE",
    "YZ_SPEED_RANGE",
    "PROJECTION_DISTANCE_RANGE",
    "OPACITY_RANGE",
    "COLOR_SCHEME_ENDPOINTS",
]
