"""
multipass-exporter entry point.

Usage:
    multipass-exporter                              Serve metrics on :1986/metrics
    multipass-exporter --config exporter.yaml       Serve using a YAML config
    multipass-exporter --mock                       Serve simulated instances
    multipass-exporter snapshot                     One-shot scrape, printed as a table
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Tuple

import click

from multipass_exporter import __version__
from multipass_exporter.collector.base import CommandRunner
from multipass_exporter.collector.mock_runner import MockRunner
from multipass_exporter.collector.subprocess_runner import SubprocessRunner
from multipass_exporter.config import ExporterConfig, load_config
from multipass_exporter.errors import CollectionError, ConfigError
from multipass_exporter.server import serve


log = logging.getLogger("multipass_exporter")


def _load_configuration(config_path: Optional[str], overrides: dict) -> Tuple[ExporterConfig, str]:
    try:
        if config_path is None:
            cfg, source = ExporterConfig(), "defaults"
        else:
            cfg, loaded = load_config(config_path)
            source = config_path if loaded else f"defaults ({config_path} not found)"
        overrides = {key: value for key, value in overrides.items() if value is not None}
        cfg = dataclasses.replace(cfg, **overrides).validate()
    except ConfigError as exc:
        raise click.ClickException(f"Configuration error: {exc}") from exc

    return cfg, source


def _format_value(value: float) -> str:
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:.2f}"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="multipass-exporter")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Path to YAML configuration file (optional)")
@click.option("--port", type=int, default=None, help="Port to listen on (default 1986)")
@click.option("--metrics-path", default=None, help="HTTP path for metrics (default /metrics)")
@click.option("--timeout", "timeout_seconds", type=float, default=None,
              help="Seconds to wait for `multipass info` (default 5)")
@click.option("--mock", is_flag=True, default=False, help="Use simulated Multipass instances")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path: Optional[str], port: Optional[int], metrics_path: Optional[str],
        timeout_seconds: Optional[float], mock: bool, verbose: bool):
    """Multipass Exporter - Prometheus metrics for Multipass instances."""
    cfg, source = _load_configuration(config_path, {
        "port": port,
        "metrics_path": metrics_path,
        "timeout_seconds": timeout_seconds,
    })

    logging.basicConfig(
        level=logging.DEBUG if verbose else cfg.logging_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    log.info("Using configuration from %s: %s", source, cfg.describe())

    runner: CommandRunner = MockRunner() if mock else SubprocessRunner()

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["runner"] = runner

    if ctx.invoked_subcommand is None:
        serve(cfg, runner)


@cli.command()
@click.pass_context
def snapshot(ctx):
    """Run one scrape and print every reading."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table
    from multipass_exporter.collector.fetcher import SnapshotFetcher
    from multipass_exporter.engine.deriver import MetricDeriver

    cfg: ExporterConfig = ctx.obj["config"]
    fetcher = SnapshotFetcher(runner=ctx.obj["runner"], timeout_seconds=cfg.timeout_seconds)

    try:
        instances = fetcher.fetch()
    except CollectionError as exc:
        raise click.ClickException(f"Collection failed: {exc}") from exc

    readings = MetricDeriver().derive(instances)

    console = Console()
    table = Table(show_header=True, header_style="bold", title=f"{len(instances)} instances")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Labels", style="dim")
    table.add_column("Value", justify="right")

    for reading in readings:
        labels = ", ".join(f'{k}="{v}"' for k, v in reading.labels.items())
        table.add_row(reading.descriptor.name, escape(labels), _format_value(reading.value))

    console.print(table)


if __name__ == "__main__":
    cli()
