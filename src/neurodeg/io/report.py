"""Report sink: write raw and summary tables to one Excel workbook."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


def write_report(path: Path, sheets: dict[str, pd.DataFrame]) -> Path:
    """Write each DataFrame to its own sheet of an .xlsx workbook.

    Any existing file at ``path`` is replaced, never appended to.

    Args:
        path: Output workbook path.
        sheets: Sheet name -> table, written in insertion order.

    Returns:
        The path written.
    """
    path = Path(path)
    if path.exists():
        path.unlink()
        logger.info("Replaced existing report %s", path)

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in sheets.items():
            _excel_safe(df).to_excel(writer, sheet_name=name, index=False)
    return path


def _excel_safe(df: pd.DataFrame) -> pd.DataFrame:
    """Convert categorical and nullable columns to plain object values."""
    out = df.copy()
    for col in out.columns:
        if isinstance(out[col].dtype, pd.CategoricalDtype):
            out[col] = out[col].astype(object)
        elif pd.api.types.is_extension_array_dtype(out[col].dtype):
            out[col] = out[col].astype(object)
        out[col] = out[col].where(out[col].notna(), None)
    return out
