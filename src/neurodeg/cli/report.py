"""neurodeg report / count-report — cohort statistics workbooks."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.table import Table

from neurodeg.cli.utils import console, error_handler, fail, load_config, require_file

if TYPE_CHECKING:
    import pandas as pd

    from neurodeg.cohort import CohortReport
    from neurodeg.core import AnalysisConfig
    from neurodeg.io import ExperimentFiles


def _format(value: object) -> str:
    if isinstance(value, float):
        return "" if value != value else f"{value:.4g}"
    return str(value)


def _print_summary(summary: pd.DataFrame, title: str) -> None:
    table = Table(show_header=True, title=title)
    for col in summary.columns:
        if col == summary.columns[0]:
            table.add_column(col, style="bold")
        else:
            table.add_column(col)
    for row in summary.itertuples(index=False):
        table.add_row(*(_format(v) for v in row))
    console.print(table)


def _outlier_count(raw: pd.DataFrame) -> int:
    flag_columns = [c for c in raw.columns if c.startswith("suspected_outlier_")]
    return int(raw[flag_columns].notna().any(axis=1).sum()) if flag_columns else 0


def build_neurite_report(files: ExperimentFiles, config: AnalysisConfig) -> CohortReport:
    """Join, summarize and write the neurite degeneration workbook."""
    from neurodeg.cohort import (
        NEURITE_SUMMARY_SHEET,
        analyze_neurite_cohort,
        assemble_cohort,
    )
    from neurodeg.io import read_feature_table, read_sequence_metadata, write_report

    require_file(files.feature_table, "Feature table")
    require_file(files.sequence_file, "Sequence file")

    features = read_feature_table(files.feature_table)
    sequence = read_sequence_metadata(files.sequence_file)
    merged = assemble_cohort(features, sequence)
    result = analyze_neurite_cohort(merged, config)
    write_report(files.neurite_report, result.sheets(NEURITE_SUMMARY_SHEET))

    excluded = int((~result.raw["included"]).sum())
    console.print()
    console.print("[green]Cohort report written[/green]")
    console.print(f"  Images: {len(result.raw)} ({excluded} excluded)")
    console.print(f"  Suspected outliers: {_outlier_count(result.raw)}")
    console.print(f"  Report: {files.neurite_report}")
    _print_summary(result.summary, NEURITE_SUMMARY_SHEET)
    return result


@click.command()
@click.option(
    "-e", "--experiment", required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Experiment folder holding the feature table and sequence file.",
)
@click.option(
    "-c", "--config", "config_path", default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML analysis configuration (marker and reference treatment).",
)
@click.option(
    "--marker", default=None,
    help="Neurite marker label in the file names. Overrides the config.",
)
@click.option(
    "--reference", default=None,
    help="Reference treatment for normalization. Overrides the config.",
)
@error_handler
def report(
    experiment: str,
    config_path: str | None,
    marker: str | None,
    reference: str | None,
) -> None:
    """Build the neurite degeneration report from a feature table."""
    from dataclasses import replace

    from neurodeg.io import ExperimentFiles

    config = load_config(config_path)
    overrides = {}
    if marker:
        overrides["neurite_marker"] = marker
    if reference:
        overrides["reference_treatment"] = reference
    if overrides:
        config = replace(config, **overrides)

    build_neurite_report(ExperimentFiles(Path(experiment), config.neurite_marker), config)


@click.command("count-report")
@click.option(
    "-e", "--experiment", required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Experiment folder holding the nuclei count table and sequence file.",
)
@click.option(
    "--neun-channel", default="C1", show_default=True,
    help="Slice prefix of the NeuN channel.",
)
@click.option(
    "--tunel-channel", default="C2", show_default=True,
    help="Slice prefix of the TUNEL channel.",
)
@click.option(
    "--reference", default="Null", show_default=True,
    help="Reference treatment for normalization.",
)
@error_handler
def count_report(
    experiment: str,
    neun_channel: str,
    tunel_channel: str,
    reference: str,
) -> None:
    """Build the NeuN/TUNEL nuclei count report."""
    from neurodeg.cohort import (
        COUNT_SUMMARY_SHEET,
        analyze_count_cohort,
        assemble_count_table,
        read_count_table,
    )
    from neurodeg.io import ExperimentFiles, read_sequence_metadata, write_report

    if neun_channel == tunel_channel:
        fail("--tunel-channel must differ from --neun-channel")

    files = ExperimentFiles(Path(experiment))
    require_file(files.count_table, "Nuclei count table")
    require_file(files.sequence_file, "Sequence file")

    counts = read_count_table(files.count_table)
    sequence = read_sequence_metadata(files.sequence_file)
    table = assemble_count_table(counts, sequence, neun_channel, tunel_channel)
    result = analyze_count_cohort(table, reference)
    write_report(files.count_report, result.sheets(COUNT_SUMMARY_SHEET))

    console.print()
    console.print("[green]Nuclei count report written[/green]")
    console.print(f"  Images: {len(result.raw)}")
    console.print(f"  Suspected outliers: {_outlier_count(result.raw)}")
    console.print(f"  Report: {files.count_report}")
    _print_summary(result.summary, COUNT_SUMMARY_SHEET)
