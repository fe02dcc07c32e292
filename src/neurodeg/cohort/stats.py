"""Statistics & outlier engine: Tukey fences, group means, normalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from neurodeg.core.config import AnalysisConfig

logger = logging.getLogger(__name__)

RAW_SHEET = "Raw Data"
NEURITE_SUMMARY_SHEET = "Neurite Analysis Summary"

GROUP_COLUMN = "treatment_level"
FENCE_FACTOR = 1.5

NEURITE_TRACKED_METRICS = ("degeneration_index", "neurite_length_per_cell")
NEURITE_SUMMARY_METRICS = (
    "degeneration_index",
    "neurite_length_per_cell",
    "attachment_points_per_cell",
)


@dataclass(frozen=True)
class CohortReport:
    """Raw per-image table and per-treatment summary of one cohort.

    Attributes:
        raw: Every merged row, with ``included`` and outlier-flag columns.
        summary: One row per observed treatment level.
    """

    raw: pd.DataFrame
    summary: pd.DataFrame

    def sheets(self, summary_sheet: str) -> dict[str, pd.DataFrame]:
        """Workbook sheets in output order."""
        return {RAW_SHEET: self.raw, summary_sheet: self.summary}


def _as_float(values: pd.Series | Sequence[float] | np.ndarray) -> np.ndarray:
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype="float64", na_value=np.nan)
    return np.asarray(values, dtype=np.float64)


def is_outlier(values: pd.Series | Sequence[float] | np.ndarray) -> np.ndarray:
    """Tukey-fence outlier test against the values' own quartiles.

    Quartiles use linear interpolation between order statistics (R's
    default type 7). A value is an outlier when it lies below
    ``Q1 - 1.5*IQR`` or above ``Q3 + 1.5*IQR``. Missing values are never
    flagged and do not contribute to the quartiles.

    Returns:
        Boolean array aligned with ``values``.
    """
    arr = _as_float(values)
    flags = np.zeros(arr.shape, dtype=bool)
    finite = np.isfinite(arr)
    if not finite.any():
        return flags
    q1, q3 = np.percentile(arr[finite], [25, 75])
    iqr = q3 - q1
    lower = q1 - FENCE_FACTOR * iqr
    upper = q3 + FENCE_FACTOR * iqr
    flags[finite] = (arr[finite] < lower) | (arr[finite] > upper)
    return flags


def included_mask(df: pd.DataFrame) -> pd.Series:
    """Rows in the statistics domain: at least one nucleus and a defined index."""
    nuclei = df["nuclei_count"].to_numpy(dtype="float64", na_value=np.nan)
    index = df["degeneration_index"].to_numpy(dtype="float64", na_value=np.nan)
    return pd.Series((nuclei > 0) & np.isfinite(index), index=df.index, name="included")


def flag_outliers(
    df: pd.DataFrame,
    metrics: Iterable[str],
    label_column: str = "filename",
    group_column: str = GROUP_COLUMN,
    mask: pd.Series | None = None,
) -> pd.DataFrame:
    """Add a ``suspected_outlier_<metric>`` column per metric.

    Each flag column holds the row's ``label_column`` value when the row
    is an outlier within its group, else None. Only rows selected by
    ``mask`` that have a group take part.

    Returns:
        A copy of ``df`` with the flag columns appended.
    """
    out = df.copy()
    eligible = df[group_column].notna()
    if mask is not None:
        eligible &= mask.astype(bool)
    candidates = df[eligible]
    labels = df[label_column].tolist()

    for metric in metrics:
        flags = pd.Series(False, index=df.index)
        for _, group in candidates.groupby(group_column, observed=True):
            flags.loc[group.index] = is_outlier(group[metric])
        out[f"suspected_outlier_{metric}"] = pd.Series(
            [label if flag else None for label, flag in zip(labels, flags)],
            index=df.index,
            dtype=object,
        )
        if flags.any():
            logger.info("%s: %d suspected outliers", metric, int(flags.sum()))
    return out


def warn_missing_reference(summary: pd.DataFrame, reference: str | None) -> bool:
    """Log a warning when the reference group is absent. Returns True if present."""
    if reference is None:
        return False
    if (summary["treatment"] == reference).any():
        return True
    logger.warning(
        "Reference treatment %r not present; normalized columns left empty", reference,
    )
    return False


def add_normalized(
    summary: pd.DataFrame,
    source_column: str,
    name: str,
    reference: str | None,
    percent: bool = True,
    group_column: str = "treatment",
) -> pd.DataFrame:
    """Add ``normalized_<name>``: ``source_column`` relative to the reference row.

    Percentage metrics are scaled to 100 at the reference; ratio metrics
    are expressed as a fold change (1.0 at the reference). When the
    reference group is absent the column is all NaN.
    """
    column = f"normalized_{name}"
    summary = summary.copy()
    is_ref = summary[group_column] == reference if reference is not None else None
    if is_ref is None or not is_ref.any():
        summary[column] = np.nan
        return summary

    values = summary[source_column].to_numpy(dtype="float64", na_value=np.nan)
    ref_value = float(summary.loc[is_ref, source_column].iloc[0])
    with np.errstate(divide="ignore", invalid="ignore"):
        normalized = values / ref_value * 100.0
        if not percent:
            normalized = normalized / 100.0
    summary[column] = normalized
    return summary


def summarize(
    df: pd.DataFrame,
    metrics: Iterable[str],
    reference: str | None = None,
    percent_metrics: Iterable[str] = (),
    ratio_metrics: Iterable[str] = (),
    group_column: str = GROUP_COLUMN,
    mask: pd.Series | None = None,
) -> pd.DataFrame:
    """Per-group means of ``metrics`` over the rows selected by ``mask``.

    Args:
        df: Merged per-image table.
        metrics: Columns to average; each becomes ``mean_<metric>``.
        reference: Treatment whose means define 100% (or fold change 1).
        percent_metrics: Metrics normalized as percentages.
        ratio_metrics: Metrics normalized as fold changes.
        group_column: Ordered categorical grouping column.
        mask: Rows to include. Defaults to all rows.

    Returns:
        One row per observed group, in level order, with a ``treatment``
        column, ``n_images``, the means and any normalized columns.
    """
    metrics = list(metrics)
    data = df if mask is None else df[mask.astype(bool)]
    numeric = pd.DataFrame(
        {m: data[m].to_numpy(dtype="float64", na_value=np.nan) for m in metrics},
        index=data.index,
    )
    numeric[group_column] = data[group_column]

    grouped = numeric.groupby(group_column, observed=True, dropna=True)
    summary = grouped.size().rename("n_images").to_frame()
    for metric in metrics:
        summary[f"mean_{metric}"] = grouped[metric].mean()
    summary = summary.reset_index().rename(columns={group_column: "treatment"})

    normalize = [(m, True) for m in percent_metrics] + [(m, False) for m in ratio_metrics]
    if normalize:
        warn_missing_reference(summary, reference)
    for metric, percent in normalize:
        summary = add_normalized(summary, f"mean_{metric}", metric, reference, percent=percent)
    return summary


def analyze_neurite_cohort(
    merged: pd.DataFrame, config: AnalysisConfig | None = None,
) -> CohortReport:
    """Flag outliers and summarize a merged neurite cohort.

    Rows with no nuclei or an undefined degeneration index stay in the
    raw table with ``included`` False and take no part in the statistics.

    Args:
        merged: Output of ``assemble_cohort``.
        config: Supplies the reference treatment for normalization.

    Returns:
        CohortReport with the raw and summary tables.
    """
    cfg = config or AnalysisConfig()
    included = included_mask(merged)
    excluded = int((~included).sum())
    if excluded:
        logger.info("Excluded %d images without nuclei or neurite area", excluded)

    raw = merged.copy()
    raw["included"] = included
    raw = flag_outliers(raw, NEURITE_TRACKED_METRICS, mask=included)

    summary = summarize(
        raw,
        NEURITE_SUMMARY_METRICS,
        reference=cfg.reference_treatment,
        percent_metrics=("neurite_length_per_cell",),
        ratio_metrics=("degeneration_index",),
        mask=included,
    )
    return CohortReport(raw=raw, summary=summary)
