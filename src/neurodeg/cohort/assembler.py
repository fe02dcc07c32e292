"""Cohort assembler: join feature records to sequence metadata."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from neurodeg.cohort.vocabulary import TREATMENT_LEVELS, is_known_treatment, parse_condition
from neurodeg.core.exceptions import CohortJoinError
from neurodeg.io.sequence import read_sequence_metadata

logger = logging.getLogger(__name__)

KEY_COLUMN = "_key"

# Derived column -> (numerator, denominator)
DERIVED_RATIOS: dict[str, tuple[str, str]] = {
    "degeneration_index": ("fragmented_neurite_area", "total_neurite_area"),
    "neurite_length_per_cell": ("total_neurite_length", "nuclei_count"),
    "attachment_points_per_cell": ("neurite_attachment_points", "nuclei_count"),
}

__all__ = [
    "DERIVED_RATIOS",
    "add_treatment_columns",
    "assemble_cohort",
    "join_on_filename",
    "normalize_filename_key",
    "read_sequence_metadata",
    "safe_ratio",
]


def normalize_filename_key(name: object) -> str:
    """Join key for a filename: trimmed, last extension removed, case kept.

    >>> normalize_filename_key(" Slide1_03.vsi ")
    'Slide1_03'
    """
    text = str(name).strip()
    stem, dot, _ = text.rpartition(".")
    if dot and stem:
        return stem.strip()
    return text


def join_on_filename(
    features: pd.DataFrame,
    sequence: pd.DataFrame,
    feature_column: str,
    sequence_column: str,
) -> pd.DataFrame:
    """Inner-join two tables on their normalized filename keys.

    Every key must appear exactly once on each side.

    Returns:
        The joined frame, sequence columns first, sorted by key.

    Raises:
        CohortJoinError: On duplicate keys or rows without a partner.
    """
    fkeys = features[feature_column].map(normalize_filename_key)
    skeys = sequence[sequence_column].map(normalize_filename_key)

    duplicates = sorted(set(fkeys[fkeys.duplicated()]) | set(skeys[skeys.duplicated()]))
    unmatched_features = sorted(set(fkeys) - set(skeys))
    unmatched_sequence = sorted(set(skeys) - set(fkeys))
    if duplicates or unmatched_features or unmatched_sequence:
        raise CohortJoinError(unmatched_features, unmatched_sequence, duplicates)

    left = sequence.assign(**{KEY_COLUMN: skeys})
    right = features.assign(**{KEY_COLUMN: fkeys})
    merged = left.merge(right, on=KEY_COLUMN, how="inner", validate="one_to_one")
    merged = merged.sort_values(KEY_COLUMN, kind="stable").reset_index(drop=True)
    return merged.drop(columns=KEY_COLUMN)


def safe_ratio(numerator: pd.Series, denominator: pd.Series) -> np.ndarray:
    """Element-wise ratio that is NaN where the denominator is 0 or missing."""
    num = numerator.to_numpy(dtype="float64", na_value=np.nan)
    den = denominator.to_numpy(dtype="float64", na_value=np.nan)
    undefined = np.isnan(den) | (den == 0)
    out = np.full(num.shape, np.nan)
    np.divide(num, den, out=out, where=~undefined)
    return out


def add_treatment_columns(df: pd.DataFrame, condition_column: str = "Condition") -> pd.DataFrame:
    """Replace the raw condition column with treatment, level and field.

    Treatments outside the vocabulary keep their text in ``treatment``
    and get a missing ``treatment_level``.
    """
    parsed = [parse_condition(raw) for raw in df[condition_column]]
    treatments = [t for t, _ in parsed]
    levels = [t if is_known_treatment(t) else None for t in treatments]
    out = df.drop(columns=condition_column)
    position = df.columns.get_loc(condition_column)
    out.insert(position, "treatment", treatments)
    out.insert(
        position + 1,
        "treatment_level",
        pd.Categorical(levels, categories=list(TREATMENT_LEVELS), ordered=True),
    )
    out.insert(position + 2, "field", pd.array([f for _, f in parsed], dtype="Int64"))

    unknown = sorted({t for t in treatments if not is_known_treatment(t)})
    if unknown:
        logger.info("Treatments outside the vocabulary: %s", ", ".join(unknown))
    return out


def assemble_cohort(features: pd.DataFrame, sequence: pd.DataFrame) -> pd.DataFrame:
    """Build the merged per-image table.

    Args:
        features: Feature table as returned by ``read_feature_table``.
        sequence: Sequence metadata as returned by ``read_sequence_metadata``.

    Returns:
        One row per image with the sequence columns (``Filename`` renamed
        to ``original_filename``), ``treatment``, ``treatment_level``,
        ``field``, the feature columns, and the derived ratios.

    Raises:
        CohortJoinError: If the two tables cannot be matched one-to-one.
    """
    sequence = sequence.rename(columns={"Filename": "original_filename"})
    sequence = sequence.sort_values("original_filename", kind="stable")
    features = features.sort_values("filename", kind="stable")

    merged = join_on_filename(features, sequence, "filename", "original_filename")
    merged = add_treatment_columns(merged)

    for column, (numerator, denominator) in DERIVED_RATIOS.items():
        merged[column] = safe_ratio(merged[numerator], merged[denominator])

    logger.info("Assembled %d images across %d treatments",
                len(merged), merged["treatment"].nunique())
    return merged
