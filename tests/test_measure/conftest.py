"""Shared fixtures for measurement module tests."""

from __future__ import annotations

import numpy as np
import pytest

from neurodeg.core import BinaryMask, MaskKind, PipelineContext
from neurodeg.segment import derive_composites


def make_mask(data: np.ndarray, kind: MaskKind, pixel_size: float = 1.0) -> BinaryMask:
    return BinaryMask(data=np.asarray(data, dtype=bool), kind=kind, pixel_size=pixel_size, pixel_unit="µm")


@pytest.fixture
def attached_context() -> PipelineContext:
    """Hand-built masks for one image.

    Layout (64x64, 1 µm pixels):
        - Nuclei: two 5x5 squares and one 2x2 speck (below the area floor).
        - Neurites: a horizontal line leaving the first nucleus at row 12
          and a vertical line ending one pixel above it.
    """
    soma = np.zeros((64, 64), dtype=bool)
    soma[10:15, 10:15] = True
    soma[40:45, 40:45] = True
    soma[55:57, 5:7] = True

    neurite = np.zeros((64, 64), dtype=bool)
    neurite[12, 15:41] = True
    neurite[0:10, 12] = True

    soma_mask = make_mask(soma, MaskKind.SOMA)
    neurite_mask = make_mask(neurite, MaskKind.NEURITE)
    without, network = derive_composites(soma_mask, neurite_mask)
    return PipelineContext(
        filename="img01.tif",
        soma=soma_mask,
        neurite=neurite_mask,
        neurite_without_soma=without,
        network=network,
    )
