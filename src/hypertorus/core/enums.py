# hypertorus/core/enums.py

from enum import Enum
from typing import Tuple

import numpy as np

from hypertorus.core.constants import COLOR_SCHEME_ENDPOINTS


class ColorScheme(str, Enum):
    """Endpoint palettes used to color the torus by its first angle."""
    CYBER = "cyber"
    THERMAL = "thermal"
    MONOCHROME = "monochrome"

    def endpoints(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (color_a, color_b) as float64 RGB arrays in [0, 1]."""
        a, b = COLOR_SCHEME_ENDPOINTS[self.value]
        return np.asarray(a, dtype=np.float64) / 255.0, np.asarray(b, dtype=np.float64) / 255.0

    def toggled(self) -> "ColorScheme":
        """Color-cycle button: cyber goes to thermal, everything else back to cyber."""
        return ColorScheme.THERMAL if self is ColorScheme.CYBER else ColorScheme.CYBER


__all__ = [
    "ColorScheme",
]
