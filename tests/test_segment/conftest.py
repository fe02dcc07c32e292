"""Shared fixtures for segmentation module tests."""

from __future__ import annotations

import numpy as np
import pytest

from neurodeg.core import NEURITE_ROLE, SOMA_ROLE, CalibratedRaster
from tests.conftest import make_neuron_image


@pytest.fixture
def neuron_planes() -> np.ndarray:
    return make_neuron_image()


@pytest.fixture
def soma_raster(neuron_planes: np.ndarray) -> CalibratedRaster:
    return CalibratedRaster(
        data=neuron_planes[0], pixel_size=1.0, pixel_unit="µm", role=SOMA_ROLE, channel=1,
    )


@pytest.fixture
def neurite_raster(neuron_planes: np.ndarray) -> CalibratedRaster:
    return CalibratedRaster(
        data=neuron_planes[1], pixel_size=1.0, pixel_unit="µm", role=NEURITE_ROLE, channel=2,
    )
