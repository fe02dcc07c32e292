"""Shared fixtures for IO module tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from neurodeg.core import BinaryMask, FeatureRecord, MaskKind, PipelineContext


@pytest.fixture
def records() -> list[FeatureRecord]:
    """Two feature records, one without an attachment measurement."""
    return [
        FeatureRecord(
            filename="EXP1_01.tif",
            neurite_attachment_points=4,
            total_neurite_length=0.1 + 0.2,
            max_branch_length=41.012345678901234,
            mean_branch_length=12.5,
            end_points=7,
            branches=5,
            trees=2,
            nuclei_count=3,
            nuclei_total_area=301.25,
            nuclei_average_area=301.25 / 3,
            total_neuron_area=1234.5,
            fragmented_neurite_area=0.09,
            total_neurite_area=85.0,
        ),
        FeatureRecord(
            filename="EXP1_02.tif",
            neurite_attachment_points=None,
            total_neurite_length=0.0,
            max_branch_length=0.0,
            mean_branch_length=0.0,
            end_points=0,
            branches=0,
            trees=0,
            nuclei_count=0,
            nuclei_total_area=0.0,
            nuclei_average_area=0.0,
            total_neuron_area=0.0,
            fragmented_neurite_area=0.0,
            total_neurite_area=0.0,
        ),
    ]


@pytest.fixture
def pipeline_context() -> PipelineContext:
    """Small context with distinct soma, neurite and network masks."""
    soma = np.zeros((16, 16), dtype=bool)
    soma[4:8, 4:8] = True
    neurite = np.zeros((16, 16), dtype=bool)
    neurite[6, 4:14] = True

    def mask(data: np.ndarray, kind: MaskKind) -> BinaryMask:
        return BinaryMask(data=data, kind=kind, pixel_size=0.5, pixel_unit="µm")

    soma_mask = mask(soma, MaskKind.SOMA)
    neurite_mask = mask(neurite, MaskKind.NEURITE)
    without = neurite_mask.subtract(soma_mask, MaskKind.NEURITE_WITHOUT_SOMA)
    network = soma_mask.union(without, MaskKind.NEURONAL_NETWORK)
    return PipelineContext(
        filename="img01.tif",
        soma=soma_mask,
        neurite=neurite_mask,
        neurite_without_soma=without,
        network=network,
    )


@pytest.fixture
def sequence_file(tmp_path: Path) -> Path:
    """Sequence export with a free-text preamble before the header row."""
    path = tmp_path / "EXP1_Image_Capture.txt"
    path.write_text(
        "Slide scanner export\n"
        "Date: 2024-09-01\n"
        "\n"
        "Filename, Condition ,Mouse ID\n"
        " EXP1_01.vsi ,Null_1,M1\n"
        "EXP1_02.vsi,miR#5(L)_2,M2\n"
        ",,\n"
    )
    return path
