"""Shared fixtures for core module tests."""

from __future__ import annotations

import numpy as np
import pytest

from neurodeg.core import BinaryMask, MaskKind


@pytest.fixture
def square_mask() -> BinaryMask:
    """10x10 mask with a 4x4 square, calibrated at 0.5 µm/pixel."""
    data = np.zeros((10, 10), dtype=bool)
    data[2:6, 2:6] = True
    return BinaryMask(data=data, kind=MaskKind.SOMA, pixel_size=0.5, pixel_unit="µm")


@pytest.fixture
def bar_mask() -> BinaryMask:
    """10x10 mask with a horizontal bar crossing the square's bottom rows."""
    data = np.zeros((10, 10), dtype=bool)
    data[4:6, 0:10] = True
    return BinaryMask(data=data, kind=MaskKind.NEURITE, pixel_size=0.5, pixel_unit="µm")
