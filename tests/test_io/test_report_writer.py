"""Tests for neurodeg.io.report."""

import pandas as pd
import pytest

from neurodeg.io.report import write_report


@pytest.fixture
def sheets() -> dict[str, pd.DataFrame]:
    raw = pd.DataFrame({
        "filename": ["a", "b"],
        "treatment_level": pd.Categorical(["Null", None], categories=["Null", "LOX"]),
        "field": pd.array([1, None], dtype="Int64"),
        "suspected_outlier_degeneration_index": [None, "b"],
    })
    summary = pd.DataFrame({"treatment": ["Null"], "n_images": [1]})
    return {"Raw Data": raw, "Neurite Analysis Summary": summary}


class TestWriteReport:
    def test_sheets_in_order(self, tmp_path, sheets):
        path = write_report(tmp_path / "report.xlsx", sheets)
        book = pd.read_excel(path, sheet_name=None)
        assert list(book) == ["Raw Data", "Neurite Analysis Summary"]
        assert book["Raw Data"]["filename"].tolist() == ["a", "b"]
        assert book["Neurite Analysis Summary"]["n_images"].tolist() == [1]

    def test_replaces_existing_file(self, tmp_path, sheets):
        path = tmp_path / "report.xlsx"
        path.write_bytes(b"stale")
        write_report(path, sheets)
        assert list(pd.read_excel(path, sheet_name=None)) == list(sheets)
