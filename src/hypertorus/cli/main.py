# src/hypertorus/cli/main.py
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer
import yaml
from rich.console import Console
from rich.table import Table

from hypertorus import __version__
from hypertorus.cli.common import load_simulation_config, parse_seed, resolve_output_path
from hypertorus.core.constants import STEREO_EPSILON
from hypertorus.core.logging import logger, set_console_level, setup_json_logfile, setup_logfile
from hypertorus.geometry import PointSet, PointSetGenerator, max_projected_radius, project, rotate_4d

console = Console()

app = typer.Typer(
    help="hypertorus: rotating Clifford torus, projected from 4D to 3D",
    context_settings={"help_option_names": ["-h", "--help"]}
)

ConfigOption = typer.Option(None, "--config", "-c", help="Configuration file path (default: auto-detect)")
SetOption = typer.Option(None, "--set", help="Override a config field, e.g. --set projection_distance=3.0")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit", is_eager=True),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file (rotated)"),
    log_json: bool = typer.Option(False, "--log-json", help="Write the log file as JSON lines"),
):
    """
    Generate and project torus point clouds from the command line.

    Use 'hypertorus COMMAND --help' to see options for specific commands.
    """
    if version:
        typer.echo(f"hypertorus version {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    set_console_level("DEBUG" if verbose else "WARNING")
    if log_file is not None:
        level = "DEBUG" if verbose else "INFO"
        if log_json:
            sink_id = setup_json_logfile(str(log_file), level=level)
        else:
            sink_id = setup_logfile(str(log_file), level=level)
        ctx.call_on_close(lambda: logger.remove(sink_id))
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@app.command("info")
def info(
    config: Optional[Path] = ConfigOption,
    overrides: Optional[List[str]] = SetOption,
):
    """Show the resolved configuration and derived quantities."""
    cfg = load_simulation_config(config, overrides)

    table = Table(title="Simulation config")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, value in cfg.model_dump(mode="json").items():
        table.add_row(name, str(value))

    bound = max_projected_radius(cfg.projection_distance)
    table.add_row("structural key", f"({cfg.particle_count}, {cfg.color_scheme.value})", style="dim")
    table.add_row("max projected radius", f"{bound:.4f}", style="dim")
    console.print(table)


@app.command("frames")
def frames(
    config: Optional[Path] = ConfigOption,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: outputs/hypertorus/<timestamp>)"),
    seed: Optional[str] = typer.Option(None, "--seed", help="Random seed (integer or 'random' for time-based)"),
    n_frames: int = typer.Option(60, "--frames", "-n", min=1, help="Number of frames to project"),
    fps: float = typer.Option(60.0, "--fps", min=1e-6, help="Frame rate; frame k is taken at time k / fps"),
    start: float = typer.Option(0.0, "--start", help="Time of the first frame"),
    overrides: Optional[List[str]] = SetOption,
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without executing"),
):
    """Project a run of frames and save positions and colors to frames.npz."""
    cfg = load_simulation_config(config, overrides)
    parsed_seed = parse_seed(seed)

    console.print(f"[bold green]Projecting {n_frames} frames of {cfg.particle_count} points[/bold green]")
    if parsed_seed is not None:
        console.print(f"Seed: {parsed_seed}")
    if dry_run:
        console.print("[yellow]DRY RUN - not executing[/yellow]")
        return

    try:
        output_path = resolve_output_path(output)
        point_set = PointSetGenerator(seed=parsed_seed).generate(cfg.particle_count, cfg.color_scheme)
        times = start + np.arange(n_frames, dtype=np.float64) / fps
        positions = np.empty((n_frames, 3 * len(point_set)), dtype=np.float32)
        for k, t in enumerate(times):
            project(point_set, float(t), cfg.xw_speed, cfg.yz_speed, cfg.projection_distance, positions[k])

        np.savez_compressed(
            output_path / "frames.npz",
            times=times,
            positions=positions,
            colors=point_set.color_buffer(),
            angles=point_set.angles,
        )
        with open(output_path / "config.yml", "w") as f:
            yaml.safe_dump(cfg.model_dump(mode="json"), f, sort_keys=False)
        logger.info(f"Wrote {n_frames} frames to {output_path}")
    except Exception as e:
        console.print(f"[bold red]✗ Error projecting frames: {e}[/bold red]")
        raise typer.Exit(1)

    console.print(f"Output: {output_path}")
    console.print("[bold green]✓ frames completed successfully[/bold green]")


@app.command("probe")
def probe(
    u: float = typer.Option(0.0, "--u", help="First generating angle (radians)"),
    v: float = typer.Option(0.0, "--v", help="Second generating angle (radians)"),
    time: float = typer.Option(0.0, "--time", "-t", help="Elapsed simulation time"),
    config: Optional[Path] = ConfigOption,
    overrides: Optional[List[str]] = SetOption,
):
    """Trace a single torus point through rotation and projection."""
    cfg = load_simulation_config(config, overrides)
    point_set = PointSet.from_angles([u], [v], cfg.color_scheme)

    rotated = rotate_4d(point_set.points, time * cfg.xw_speed, time * cfg.yz_speed)[0]
    projected = project(point_set, time, cfg.xw_speed, cfg.yz_speed, cfg.projection_distance,
                        point_set.new_position_buffer(dtype=np.float64))
    clamped = abs(cfg.projection_distance - rotated[3]) < STEREO_EPSILON

    table = Table(title=f"Point (u={u:g}, v={v:g}) at t={time:g}")
    table.add_column("Stage", style="cyan")
    table.add_column("Coordinates", style="green")
    table.add_row("source (x, y, z, w)", _fmt(point_set.points[0]))
    table.add_row("rotated (x, y, z, w)", _fmt(rotated))
    table.add_row("projected (x, y, z)", _fmt(projected))
    table.add_row("color (r, g, b)", _fmt(point_set.colors[0]))
    if clamped:
        table.add_row("note", "denominator clamped near the pole", style="yellow")
    console.print(table)


def _fmt(values) -> str:
    return "(" + ", ".join(f"{float(c):.6f}" for c in values) + ")"


if __name__ == "__main__":
    app()
