"""
Simulation configuration for the hypertorus engine.

The presentation layer hands one SimulationConfig to the engine per frame.
Only ``particle_count`` and ``color_scheme`` are structural: a change to
either invalidates the cached point set. Everything else is read per frame
(speeds, projection distance) or passed through untouched (opacity, point
size).

Exports:
    - SimulationConfig: Frozen Pydantic model of the configuration surface.
    - StructuralKey: Frozen (particle_count, color_scheme) pair.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hypertorus.core.constants import DEFAULTS, XW_SPEED_RANGE, YZ_SPEED_RANGE
from hypertorus.core.enums import ColorScheme
from hypertorus.core.logging import logger
from hypertorus.core.utils import load_config

__all__ = [
    "SimulationConfig",
    "StructuralKey",
]


class StructuralKey(BaseModel):
    """Configuration fields whose change requires regenerating the point set."""
    model_config = ConfigDict(frozen=True)

    particle_count: int
    color_scheme: ColorScheme


class SimulationConfig(BaseModel):
    """Per-frame configuration record supplied by the presentation layer."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    xw_speed: float = Field(
        DEFAULTS["xw_speed"], alias="xwSpeed", allow_inf_nan=False,
        description="Angular velocity of the XW rotation plane (rad / time unit)",
    )
    yz_speed: float = Field(
        DEFAULTS["yz_speed"], alias="yzSpeed", allow_inf_nan=False,
        description="Angular velocity of the YZ rotation plane (rad / time unit)",
    )
    projection_distance: float = Field(
        DEFAULTS["projection_distance"], alias="projectionDistance", gt=1.0, allow_inf_nan=False,
        description="Stereographic pole distance r; must stay outside the unit 3-sphere",
    )
    particle_count: int = Field(
        DEFAULTS["particle_count"], alias="particleCount", gt=0,
        description="Number of sampled torus points",
    )
    opacity: float = Field(DEFAULTS["opacity"], gt=0.0, le=1.0, description="Render hint")
    point_size: float = Field(DEFAULTS["point_size"], alias="pointSize", gt=0.0, description="Render hint")
    color_scheme: ColorScheme = Field(ColorScheme(DEFAULTS["color_scheme"]), alias="colorScheme")

    @field_validator("xw_speed", "yz_speed")
    @classmethod
    def warn_outside_slider_range(cls, v, info):
        """Out-of-range speeds are legal, but no stock slider can produce them."""
        lo, hi, _step = XW_SPEED_RANGE if info.field_name == "xw_speed" else YZ_SPEED_RANGE
        if not lo <= v <= hi:
            logger.warning(f"{info.field_name}={v} is outside the slider range [{lo}, {hi}]")
        return v

    # --- Derived values ---

    @property
    def structural_key(self) -> StructuralKey:
        return StructuralKey(particle_count=self.particle_count, color_scheme=self.color_scheme)

    def paused(self) -> "SimulationConfig":
        """Freeze the animation by zeroing both rotation speeds."""
        return self.model_copy(update={"xw_speed": 0.0, "yz_speed": 0.0})

    def resumed(self) -> "SimulationConfig":
        """Restore the default rotation speeds."""
        return self.model_copy(update={"xw_speed": DEFAULTS["xw_speed"], "yz_speed": DEFAULTS["yz_speed"]})

    def with_next_color_scheme(self) -> "SimulationConfig":
        return self.model_copy(update={"color_scheme": self.color_scheme.toggled()})

    def updated(self, **changes) -> "SimulationConfig":
        """Validated copy with some fields replaced (field names or their camelCase aliases)."""
        aliases = {f.alias: name for name, f in type(self).model_fields.items() if f.alias}
        data = self.model_dump()
        data.update({aliases.get(k, k): v for k, v in changes.items()})
        return type(self).model_validate(data)

    # --- Loading ---

    @classmethod
    def from_yaml(cls, path: Union[str, Path], overrides: Optional[Iterable[str]] = None) -> "SimulationConfig":
        """
        Load a config from YAML, applying dotted ``key=value`` overrides.

        Args:
            path: YAML file holding a flat mapping of config fields.
            overrides: Strings like ``"projection_distance=3.0"``.

        Returns:
            SimulationConfig: The validated configuration.
        """
        data, resolved = load_config(path, cli_overrides=list(overrides or ()))
        logger.debug(f"Loaded simulation config from {resolved}")
        return cls.model_validate(data)
