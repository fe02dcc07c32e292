"""neurodeg init-config — write the default analysis configuration."""

from __future__ import annotations

from pathlib import Path

import click

from neurodeg.cli.utils import console, error_handler, fail


@click.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
@error_handler
def init_config(path: str, force: bool) -> None:
    """Write a YAML file with every analysis option at its default."""
    from neurodeg.core import AnalysisConfig

    target = Path(path)
    if target.exists() and not force:
        fail(f"{target} exists (use --force to overwrite)")

    AnalysisConfig().to_yaml(target)
    console.print(f"[green]Wrote default configuration to {target}[/green]")
