"""Nuclei-count cohort: NeuN/TUNEL counts joined to sequence metadata."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from neurodeg.cohort.assembler import (
    add_treatment_columns,
    join_on_filename,
    normalize_filename_key,
    safe_ratio,
)
from neurodeg.cohort.stats import (
    CohortReport,
    add_normalized,
    flag_outliers,
    summarize,
    warn_missing_reference,
)
from neurodeg.core.exceptions import CohortJoinError, MetadataHeaderError

logger = logging.getLogger(__name__)

COUNT_SUMMARY_SHEET = "Nuclei Count Summary"
COUNT_METRICS = ("neun_count", "tunel_count")
_REQUIRED = ("Slice", "Count")


def read_count_table(path: Path) -> pd.DataFrame:
    """Read a per-slice nuclei count CSV (``Slice``, ``Count``, ...).

    Raises:
        MetadataHeaderError: If ``Slice`` or ``Count`` is missing.
    """
    df = pd.read_csv(path, dtype={"Slice": str})
    df.columns = [str(c).strip() for c in df.columns]
    for column in _REQUIRED:
        if column not in df.columns:
            raise MetadataHeaderError(str(path), column)
    return df


def split_slice(name: str) -> tuple[str, str]:
    """Split ``"C1-image.tif"`` into channel and filename key.

    Only the first hyphen separates the channel. A name without a hyphen
    has an empty channel.
    """
    channel, sep, rest = str(name).strip().partition("-")
    if not sep:
        return "", normalize_filename_key(channel)
    return channel.strip(), normalize_filename_key(rest)


def assemble_count_table(
    counts: pd.DataFrame,
    sequence: pd.DataFrame,
    neun_channel: str = "C1",
    tunel_channel: str = "C2",
) -> pd.DataFrame:
    """Pivot per-channel counts to one row per image and join the sequence.

    Args:
        counts: Count table with ``Slice`` and ``Count`` columns.
        sequence: Sequence metadata with ``Filename`` and ``Condition``.
        neun_channel: Slice prefix of the NeuN channel.
        tunel_channel: Slice prefix of the TUNEL channel.

    Returns:
        One row per image: sequence columns, ``treatment``,
        ``treatment_level``, ``field``, ``filename``, ``neun_count`` and
        ``tunel_count``.

    Raises:
        CohortJoinError: On repeated slices or images without a partner.
    """
    parts = [split_slice(name) for name in counts["Slice"]]
    table = pd.DataFrame({
        "channel": [channel for channel, _ in parts],
        "filename": [filename for _, filename in parts],
        "count": pd.to_numeric(counts["Count"], errors="coerce").to_numpy(),
    })

    names = {neun_channel: "neun_count", tunel_channel: "tunel_count"}
    known = table["channel"].isin(list(names))
    if not known.all():
        others = sorted(set(table.loc[~known, "channel"]))
        logger.warning("Ignoring %d slices from other channels: %s",
                       int((~known).sum()), ", ".join(others) or "(none)")
    table = table[known]

    repeated = table.duplicated(["channel", "filename"], keep=False)
    if repeated.any():
        raise CohortJoinError(duplicates=sorted(set(table.loc[repeated, "filename"])))

    wide = table.pivot(index="filename", columns="channel", values="count")
    wide = wide.rename(columns=names).reindex(columns=list(COUNT_METRICS))
    wide.columns.name = None
    wide = wide.reset_index()

    sequence = sequence.rename(columns={"Filename": "original_filename"})
    merged = join_on_filename(wide, sequence, "filename", "original_filename")
    return add_treatment_columns(merged)


def analyze_count_cohort(df: pd.DataFrame, reference: str | None = "Null") -> CohortReport:
    """Flag NeuN/TUNEL outliers and summarize counts per treatment.

    Args:
        df: Output of ``assemble_count_table``.
        reference: Treatment that defines 100% NeuN and a TUNEL/NeuN fold
            change of 1.

    Returns:
        CohortReport whose summary holds ``mean_neun_count``,
        ``mean_tunel_count``, ``tunel_neun_ratio`` (ratio of the means)
        and the normalized columns.
    """
    raw = flag_outliers(df, COUNT_METRICS)
    raw["tunel_neun_ratio"] = safe_ratio(raw["tunel_count"], raw["neun_count"])

    summary = summarize(raw, COUNT_METRICS)
    summary["tunel_neun_ratio"] = safe_ratio(
        summary["mean_tunel_count"], summary["mean_neun_count"],
    )
    warn_missing_reference(summary, reference)
    summary = add_normalized(summary, "mean_neun_count", "neun_count", reference)
    summary = add_normalized(
        summary, "tunel_neun_ratio", "tunel_neun_ratio", reference, percent=False,
    )
    return CohortReport(raw=raw, summary=summary)
