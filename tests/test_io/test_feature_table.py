"""Tests for neurodeg.io.feature_table."""

import pandas as pd

from neurodeg.io.feature_table import (
    COLUMNS,
    FeatureTableWriter,
    read_feature_records,
    read_feature_table,
    records_to_frame,
)


class TestFeatureTableWriter:
    def test_header_and_rows(self, tmp_path, records):
        path = tmp_path / "EXP1_MAP2_Neurite_Analysis.csv"
        with FeatureTableWriter(path) as writer:
            for r in records:
                writer.append(r)
            assert writer.rows_written == 2

        lines = path.read_text().splitlines()
        assert lines[0].split(",") == list(COLUMNS.values())
        assert len(lines) == 3
        assert lines[2].split(",")[1] == "NA"

    def test_rows_visible_before_close(self, tmp_path, records):
        path = tmp_path / "table.csv"
        writer = FeatureTableWriter(path).open()
        writer.append(records[0])
        assert len(path.read_text().splitlines()) == 2
        writer.close()

    def test_existing_file_replaced(self, tmp_path, records):
        path = tmp_path / "table.csv"
        path.write_text("old,content\n1,2\n3,4\n5,6\n")
        with FeatureTableWriter(path) as writer:
            writer.append(records[0])
        assert len(path.read_text().splitlines()) == 2


class TestReadFeatureTable:
    def test_round_trip_is_exact(self, tmp_path, records):
        path = tmp_path / "table.csv"
        with FeatureTableWriter(path) as writer:
            for r in records:
                writer.append(r)
        assert read_feature_records(path) == records

    def test_frame_types(self, tmp_path, records):
        path = tmp_path / "table.csv"
        with FeatureTableWriter(path) as writer:
            for r in records:
                writer.append(r)
        df = read_feature_table(path)
        assert list(df.columns) == list(COLUMNS)
        assert str(df["neurite_attachment_points"].dtype) == "Int64"
        assert pd.isna(df.loc[1, "neurite_attachment_points"])
        assert df.loc[0, "nuclei_count"] == 3

    def test_records_to_frame_matches_reader(self, tmp_path, records):
        path = tmp_path / "table.csv"
        with FeatureTableWriter(path) as writer:
            for r in records:
                writer.append(r)
        pd.testing.assert_frame_equal(
            records_to_frame(records), read_feature_table(path), check_dtype=False,
        )
