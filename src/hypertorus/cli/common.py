"""
Common CLI options and utilities shared across hypertorus commands.
"""
import time
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from hypertorus.core.config import SimulationConfig
from hypertorus.core.logging import logger
from hypertorus.core.utils import apply_overrides, make_output_dir

SCRIPT_NAME = "hypertorus"


def parse_seed(seed_str: Optional[str]) -> Optional[int]:
    """Parse seed string into integer, handling 'random' case."""
    if seed_str is None:
        return None
    if seed_str.lower() == 'random':
        return int(time.time() * 1000) % (2**31)  # Keep it within int32 range
    try:
        return int(seed_str)
    except ValueError:
        raise typer.BadParameter(f"Seed must be an integer or 'random', got: {seed_str}")


def resolve_config_path(config: Optional[Path], script_name: str = SCRIPT_NAME,
                        search_dirs: Optional[List[Path]] = None) -> Optional[Path]:
    """
    Resolve configuration file path with smart defaults.

    Args:
        config: Explicit config path from user
        script_name: Name used to build default file names
        search_dirs: Directories to search (default: cwd and project configs/)

    Returns:
        Path to configuration file, or None when no explicit path was given
        and no default file exists (built-in defaults apply).

    Raises:
        typer.BadParameter: If an explicit config file is not found
    """
    if config is not None:
        if config.exists():
            return config.resolve()
        raise typer.BadParameter(f"Configuration file not found: {config}")

    if search_dirs is None:
        search_dirs = [
            Path.cwd() / "configs",
            Path(__file__).parent.parent.parent.parent / "configs",  # Project root configs
        ]

    default_names = [
        f"default_{script_name}.yml",
        f"default_{script_name}.yaml",
        f"{script_name}.yml",
        f"{script_name}.yaml",
    ]

    for search_dir in search_dirs:
        if not search_dir.exists():
            continue
        for name in default_names:
            candidate = search_dir / name
            if candidate.exists():
                return candidate.resolve()
    return None


def resolve_output_path(output: Optional[Path], script_name: str = SCRIPT_NAME) -> Path:
    """
    Resolve output directory with smart defaults.

    Args:
        output: Explicit output path from user
        script_name: Name of the calling command

    Returns:
        Path to output directory (created if necessary)
    """
    if output:
        output.mkdir(parents=True, exist_ok=True)
        return output.resolve()
    return make_output_dir(script_name, base_output_dir=Path.cwd() / "outputs")


def load_simulation_config(config: Optional[Path], overrides: Optional[List[str]] = None) -> SimulationConfig:
    """Resolve, load and validate a SimulationConfig for a CLI command."""
    config_path = resolve_config_path(config)
    try:
        if config_path is None:
            logger.debug("No config file found; using built-in defaults")
            return SimulationConfig().updated(**apply_overrides({}, overrides))
        return SimulationConfig.from_yaml(config_path, overrides=overrides)
    except (ValidationError, ValueError) as e:
        raise typer.BadParameter(f"Invalid configuration: {e}")
