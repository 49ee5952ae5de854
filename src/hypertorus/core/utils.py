import datetime
import uuid
from pathlib import Path

import yaml


def parse_override_value(raw: str):
    """Interpret an override value the way YAML would ("2.5" -> 2.5, "cyber" -> "cyber")."""
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def apply_overrides(config: dict, overrides=None) -> dict:
    """
    Merge dotted ``key.sub=value`` overrides into a config dict (in place).
    """
    for override in overrides or ():
        if "=" not in override:
            raise ValueError(f"Override must look like key=value, got: {override!r}")
        key, val = override.split("=", 1)
        keys = key.strip().split(".")
        d = config
        for k in keys[:-1]:
            d = d.setdefault(k, {})
        d[keys[-1]] = parse_override_value(val.strip())
    return config


def load_config(config_file, cli_overrides=None):
    """
    Load a YAML config file and merge CLI overrides.
    Returns the config dict and the full config path used.
    """
    config_file = Path(config_file)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_file, "r") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_file}")

    apply_overrides(config, cli_overrides)
    return config, str(config_file.resolve())


def make_output_dir(script_name, base_output_dir=None):
    """
    Creates a timestamped output directory for the run.
    Returns the path to the created output directory.
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    run_id = uuid.uuid4().hex[:6]
    out_base = Path(base_output_dir or "outputs") / script_name
    out_dir = out_base / f"{timestamp}-{run_id}"
    out_dir.mkdir(parents=True, exist_ok=False)
    return out_dir
