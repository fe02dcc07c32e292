"""neurodeg CLI — top-level Click group."""

from __future__ import annotations

import logging

import click


@click.group()
@click.version_option(package_name="neurodeg")
@click.option("--verbose", "-v", is_flag=True, help="Show full tracebacks and debug logs.")
def cli(verbose: bool) -> None:
    """neurodeg — Neurite Degeneration Analysis."""
    from neurodeg.cli import utils

    utils.verbose = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _register_commands() -> None:
    # Command modules import numpy and skimage lazily; keep --help fast.
    from neurodeg.cli.analyze import analyze
    from neurodeg.cli.config_cmd import init_config
    from neurodeg.cli.report import count_report, report

    cli.add_command(analyze)
    cli.add_command(count_report)
    cli.add_command(init_config)
    cli.add_command(report)


_register_commands()
