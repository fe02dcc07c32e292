"""Per-image feature table: incremental CSV writer and reader."""

from __future__ import annotations

import csv
import math
from dataclasses import fields
from pathlib import Path

import pandas as pd

from neurodeg.core.models import FeatureRecord

MISSING = "NA"

# FeatureRecord attribute -> CSV column, in output order
COLUMNS: dict[str, str] = {
    "filename": "Filename",
    "neurite_attachment_points": "NeuriteAttachmentPoints",
    "total_neurite_length": "TotalNeuriteLength",
    "max_branch_length": "MaxBranchLength",
    "mean_branch_length": "MeanBranchLength",
    "end_points": "EndPoints",
    "branches": "Branches",
    "trees": "Trees",
    "nuclei_count": "NucleiCount",
    "nuclei_total_area": "NucleiTotalArea",
    "nuclei_average_area": "NucleiAverageArea",
    "total_neuron_area": "TotalNeuronArea",
    "fragmented_neurite_area": "FragmentedNeuriteArea",
    "total_neurite_area": "TotalNeuriteArea",
}

_INT_FIELDS = {"end_points", "branches", "trees", "nuclei_count"}


def _format(value: object) -> str:
    if value is None:
        return MISSING
    if isinstance(value, float):
        if math.isnan(value):
            return MISSING
        return repr(float(value))
    return str(value)


class FeatureTableWriter:
    """Append FeatureRecords to a CSV file, one row per completed image.

    The header is written when the file is opened. Each row is flushed
    immediately so a crash leaves every completed image on disk.
    Only one writer may hold a given path.

    Args:
        path: Output CSV path. An existing file is replaced.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._file = None
        self._writer = None
        self.rows_written = 0

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> FeatureTableWriter:
        self._file = open(self._path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        self._writer.writerow(list(COLUMNS.values()))
        self._file.flush()
        return self

    def append(self, record: FeatureRecord) -> None:
        """Write one record and flush it to disk."""
        if self._writer is None or self._file is None:
            raise RuntimeError("FeatureTableWriter is not open")
        self._writer.writerow([_format(getattr(record, attr)) for attr in COLUMNS])
        self._file.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
        self._file = None
        self._writer = None

    def __enter__(self) -> FeatureTableWriter:
        return self.open()

    def __exit__(self, *exc: object) -> None:
        self.close()


def read_feature_table(path: Path) -> pd.DataFrame:
    """Read a feature table CSV into a DataFrame with snake_case columns.

    ``NA`` cells become missing values; the attachment-point column is a
    nullable integer.
    """
    df = pd.read_csv(
        path,
        na_values=[MISSING],
        keep_default_na=False,
        float_precision="round_trip",
        dtype={"Filename": str},
    )
    missing = [col for col in COLUMNS.values() if col not in df.columns]
    if missing:
        raise ValueError(f"Feature table {path} is missing columns: {missing}")
    df = df.rename(columns={v: k for k, v in COLUMNS.items()})
    df = df[list(COLUMNS)]
    df["neurite_attachment_points"] = df["neurite_attachment_points"].astype("Int64")
    for attr in _INT_FIELDS:
        df[attr] = df[attr].astype(int)
    return df


def read_feature_records(path: Path) -> list[FeatureRecord]:
    """Read a feature table CSV back into FeatureRecords."""
    df = read_feature_table(path)
    names = [f.name for f in fields(FeatureRecord)]
    records: list[FeatureRecord] = []
    for row in df.itertuples(index=False):
        values = row._asdict()
        attachment = values["neurite_attachment_points"]
        values["neurite_attachment_points"] = None if pd.isna(attachment) else int(attachment)
        for attr in names:
            if attr in _INT_FIELDS:
                values[attr] = int(values[attr])
            elif attr not in ("filename", "neurite_attachment_points"):
                values[attr] = float(values[attr])
        records.append(FeatureRecord(**{attr: values[attr] for attr in names}))
    return records


def records_to_frame(records: list[FeatureRecord]) -> pd.DataFrame:
    """Convert in-memory FeatureRecords to the same frame ``read_feature_table`` returns."""
    rows = [{attr: getattr(r, attr) for attr in COLUMNS} for r in records]
    df = pd.DataFrame(rows, columns=list(COLUMNS))
    df["neurite_attachment_points"] = pd.array(
        [r.neurite_attachment_points for r in records], dtype="Int64",
    )
    return df
