"""neurodeg Cohort — joins, treatment vocabulary, outliers and summaries."""

from neurodeg.cohort.assembler import (
    assemble_cohort,
    join_on_filename,
    normalize_filename_key,
    read_sequence_metadata,
    safe_ratio,
)
from neurodeg.cohort.nuclei import (
    COUNT_SUMMARY_SHEET,
    analyze_count_cohort,
    assemble_count_table,
    read_count_table,
)
from neurodeg.cohort.stats import (
    NEURITE_SUMMARY_SHEET,
    RAW_SHEET,
    CohortReport,
    analyze_neurite_cohort,
    flag_outliers,
    included_mask,
    is_outlier,
    summarize,
)
from neurodeg.cohort.vocabulary import (
    TREATMENT_LEVELS,
    canonicalize_treatment,
    parse_condition,
)

__all__ = [
    "COUNT_SUMMARY_SHEET",
    "CohortReport",
    "NEURITE_SUMMARY_SHEET",
    "RAW_SHEET",
    "TREATMENT_LEVELS",
    "analyze_count_cohort",
    "analyze_neurite_cohort",
    "assemble_cohort",
    "assemble_count_table",
    "canonicalize_treatment",
    "flag_outliers",
    "included_mask",
    "is_outlier",
    "join_on_filename",
    "normalize_filename_key",
    "parse_condition",
    "read_count_table",
    "read_sequence_metadata",
    "safe_ratio",
    "summarize",
]
