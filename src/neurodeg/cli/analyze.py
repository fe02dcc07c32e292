"""neurodeg analyze — segment and measure every image of an experiment."""

from __future__ import annotations

from pathlib import Path

import click

from neurodeg.cli.utils import console, error_handler, load_config, make_progress, print_warnings


@click.command()
@click.option(
    "-e", "--experiment", required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Experiment folder; its name prefixes every output file.",
)
@click.option(
    "-s", "--source", default=None,
    type=click.Path(exists=True, file_okay=False),
    help="Folder holding the source TIFFs. Defaults to the experiment folder.",
)
@click.option(
    "-c", "--config", "config_path", default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML analysis configuration (see init-config).",
)
@click.option(
    "--workers", default=1, show_default=True, type=click.IntRange(min=1),
    help="Number of images analyzed concurrently.",
)
@click.option(
    "--mask-dir", default=None, type=click.Path(file_okay=False),
    help="Where enabled audit masks are written.",
)
@click.option(
    "--report/--no-report", default=True, show_default=True,
    help="Build the cohort report when the sequence file is present.",
)
@error_handler
def analyze(
    experiment: str,
    source: str | None,
    config_path: str | None,
    workers: int,
    mask_dir: str | None,
    report: bool,
) -> None:
    """Segment and measure every image in an experiment folder."""
    from neurodeg.cli.report import build_neurite_report
    from neurodeg.io import ExperimentFiles, read_sequence_metadata
    from neurodeg.measure import BatchAnalyzer

    config = load_config(config_path)
    files = ExperimentFiles(Path(experiment), config.neurite_marker)
    if report and files.sequence_file.exists():
        # A malformed sequence file is fatal; fail before any image is processed.
        read_sequence_metadata(files.sequence_file)
    source_dir = Path(source) if source else files.folder

    with make_progress() as progress:
        task = progress.add_task("Analyzing...", total=None)

        def on_progress(current: int, total: int, filename: str) -> None:
            progress.update(
                task, total=total, completed=current,
                description=f"Analyzing {filename}",
            )

        result = BatchAnalyzer(config).run(
            source_dir,
            files.feature_table,
            mask_dir=Path(mask_dir) if mask_dir else None,
            max_workers=workers,
            progress_callback=on_progress,
        )

    console.print()
    console.print("[green]Analysis complete[/green]")
    console.print(f"  Images processed: {result.images_processed}")
    if result.images_failed:
        console.print(f"  Images failed: {result.images_failed}")
    if result.images_skipped:
        console.print(f"  Images skipped: {result.images_skipped}")
    console.print(f"  Feature table: {files.feature_table}")
    console.print(f"  Elapsed: {result.elapsed_seconds:.1f}s")
    print_warnings(result.warnings)

    if not report:
        return
    if not files.sequence_file.exists():
        console.print(
            f"[yellow]No sequence file {files.sequence_file.name}; "
            "skipping the cohort report.[/yellow]"
        )
        return
    build_neurite_report(files, config)
