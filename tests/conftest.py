"""Shared test fixtures for neurodeg."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import tifffile

SOMA_CENTERS = ((30, 30), (66, 66))
SOMA_RADIUS = 6


def make_neuron_image(size: int = 96) -> np.ndarray:
    """Two-channel (C, Y, X) uint16 image: round somata and bright neurites.

    Channel 1 holds two disks; channel 2 holds 3-pixel-wide lines leaving
    each disk plus a few isolated dots.
    """
    yy, xx = np.mgrid[:size, :size]
    soma = np.full((size, size), 10, dtype=np.uint16)
    neurite = np.full((size, size), 10, dtype=np.uint16)
    for cy, cx in SOMA_CENTERS:
        disk = (yy - cy) ** 2 + (xx - cx) ** 2 <= SOMA_RADIUS ** 2
        soma[disk] = 200
        neurite[disk] = 120

    # Horizontal neurite from the first soma, vertical from the second
    neurite[29:32, 36:80] = 220
    neurite[10:60, 65:68] = 220
    # Isolated debris
    for y, x in ((80, 15), (85, 40), (12, 20)):
        neurite[y:y + 2, x:x + 2] = 220
    return np.stack([soma, neurite])


def write_neuron_tiff(path: Path, data: np.ndarray, pixel_size: float = 1.0) -> Path:
    """Write a (C, Y, X) image as an ImageJ hyperstack calibrated in microns."""
    tifffile.imwrite(
        str(path),
        data,
        imagej=True,
        resolution=(1.0 / pixel_size, 1.0 / pixel_size),
        metadata={"axes": "CYX", "unit": "micron"},
    )
    return path


@pytest.fixture
def neuron_image() -> np.ndarray:
    return make_neuron_image()


@pytest.fixture
def neuron_tiff(tmp_path: Path, neuron_image: np.ndarray) -> Path:
    """A single calibrated two-channel neuron image."""
    return write_neuron_tiff(tmp_path / "Slide1_01.tif", neuron_image)


@pytest.fixture
def experiment_dir(tmp_path: Path, neuron_image: np.ndarray) -> Path:
    """An experiment folder with three images and a sequence file.

    The folder is named ``EXP1``; images are ``EXP1_01.tif`` ..
    ``EXP1_03.tif`` and the sequence lists them as ``.vsi`` originals.
    """
    folder = tmp_path / "EXP1"
    folder.mkdir()
    for i in range(1, 4):
        write_neuron_tiff(folder / f"EXP1_0{i}.tif", neuron_image)

    lines = [
        "Acquisition software export",
        "Operator: test",
        "",
        "Filename,Condition,Mouse ID",
        "EXP1_01.vsi,Null_1,M1",
        "EXP1_02.vsi,Null_2,M1",
        "EXP1_03.vsi,miR92a(H)_1,M2",
    ]
    (folder / "EXP1_Image_Capture.txt").write_text("\n".join(lines) + "\n")
    return folder
