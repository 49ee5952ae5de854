from hypertorus.core.config import SimulationConfig, StructuralKey
from hypertorus.core.constants import STEREO_EPSILON
from hypertorus.core.enums import ColorScheme
from hypertorus.core.errors import InvalidArgument
from hypertorus.core.logging import logger

__all__ = [
    "ColorScheme",
    "InvalidArgument",
    "SimulationConfig",
    "STEREO_EPSILON",
    "StructuralKey",
    "logger",
]
