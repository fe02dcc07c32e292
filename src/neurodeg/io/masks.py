"""Optional audit images: write segmentation masks next to the results."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import tifffile

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.models import BinaryMask, PipelineContext

logger = logging.getLogger(__name__)


def mask_path(output_dir: Path, filename: str, marker: str, label: str) -> Path:
    """Path of an audit mask, e.g. ``img01_MAP2_Soma_Mask.tif``."""
    stem = Path(filename).stem
    return Path(output_dir) / f"{stem}_{marker}_{label}_Mask.tif"


def write_mask(path: Path, mask: BinaryMask) -> None:
    """Write a mask as an 8-bit 0/255 TIFF carrying its calibration."""
    data = mask.data.astype(np.uint8) * 255
    resolution = (1.0 / mask.pixel_size, 1.0 / mask.pixel_size)
    # ImageJ descriptions are ASCII
    unit = "micron" if mask.pixel_unit == "µm" else mask.pixel_unit
    tifffile.imwrite(
        str(path),
        data,
        imagej=True,
        resolution=resolution,
        metadata={"unit": unit},
    )


def save_audit_masks(
    context: PipelineContext,
    output_dir: Path,
    config: AnalysisConfig,
) -> list[Path]:
    """Write the masks enabled by the config's save flags.

    A failed write is logged and skipped; it never aborts the run.

    Returns:
        Paths that were written successfully.
    """
    selected = [
        ("Soma", context.soma, config.save_soma_mask),
        ("Neurite", context.neurite, config.save_neurite_mask),
        ("Network", context.network, config.save_network_mask),
    ]
    wanted = [(label, mask) for label, mask, enabled in selected if enabled]
    if not wanted:
        return []

    written: list[Path] = []
    try:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Cannot create mask directory %s: %s", output_dir, exc)
        return written

    for label, mask in wanted:
        path = mask_path(output_dir, context.filename, config.neurite_marker, label)
        try:
            write_mask(path, mask)
        except OSError as exc:
            logger.warning("Failed to save %s mask for %s: %s", label, context.filename, exc)
            continue
        written.append(path)
    return written
