"""Shared fixtures for cohort module tests."""

from __future__ import annotations

import pandas as pd
import pytest

from neurodeg.core import FeatureRecord
from neurodeg.io.feature_table import records_to_frame


def make_record(filename: str, **overrides) -> FeatureRecord:
    """FeatureRecord with plausible defaults."""
    values = dict(
        filename=filename,
        neurite_attachment_points=4,
        total_neurite_length=200.0,
        max_branch_length=50.0,
        mean_branch_length=20.0,
        end_points=10,
        branches=10,
        trees=2,
        nuclei_count=4,
        nuclei_total_area=400.0,
        nuclei_average_area=100.0,
        total_neuron_area=1000.0,
        fragmented_neurite_area=10.0,
        total_neurite_area=200.0,
    )
    values.update(overrides)
    return FeatureRecord(**values)


@pytest.fixture
def features() -> pd.DataFrame:
    """Feature table for four images, one of them without nuclei."""
    return records_to_frame([
        make_record("EXP1_01.tif"),
        make_record("EXP1_02.tif", fragmented_neurite_area=20.0),
        make_record("EXP1_03.tif", nuclei_count=0, nuclei_total_area=0.0,
                    nuclei_average_area=0.0, neurite_attachment_points=None),
        make_record("EXP1_04.tif", fragmented_neurite_area=0.0, total_neurite_area=0.0),
    ])


@pytest.fixture
def sequence() -> pd.DataFrame:
    """Sequence metadata listing the same images in a different order."""
    return pd.DataFrame({
        "Filename": ["EXP1_03.vsi", "EXP1_01.vsi", "EXP1_04.vsi", "EXP1_02.vsi"],
        "Condition": ["miR#5(H)_1", "Null_1", "Mystery_2", "Null_2"],
        "Mouse ID": ["M2", "M1", "M3", "M1"],
    })
