"""Shared fixtures for CLI module tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def count_experiment(tmp_path: Path) -> Path:
    """Experiment folder with a nuclei count table and a sequence file."""
    folder = tmp_path / "EXP2"
    folder.mkdir()
    (folder / "EXP2_Nuclei_Count.csv").write_text(
        "Slice,Count,Total Area\n"
        "C1-EXP2_01.tif,120,900.0\n"
        "C2-EXP2_01.tif,12,80.0\n"
        "C1-EXP2_02.tif,100,850.0\n"
        "C2-EXP2_02.tif,30,200.0\n"
    )
    (folder / "EXP2_Image_Capture.txt").write_text(
        "Exported sequence\n"
        "Filename,Condition\n"
        "EXP2_01.vsi,Null_1\n"
        "EXP2_02.vsi,miR#19(M)_1\n"
    )
    return folder
