"""Reader for the microscope's image-capture sequence table."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from neurodeg.core.exceptions import MetadataHeaderError

REQUIRED_COLUMNS = ("Filename", "Condition")


def find_header_line(path: Path, token: str) -> int:
    """Return the 0-based index of the first line containing ``token``.

    Raises:
        MetadataHeaderError: If no line contains the token.
    """
    with open(path, encoding="utf-8", errors="replace") as f:
        for i, line in enumerate(f):
            if token in line:
                return i
    raise MetadataHeaderError(str(path), token)


def read_sequence_metadata(
    path: Path,
    header_token: str = "Condition",
    sep: str = ",",
) -> pd.DataFrame:
    """Read the sequence table that follows the instrument's preamble.

    The capture software writes free-form lines before the table; the
    header row is the first line containing ``header_token``.

    Args:
        path: Path to the ``*_Image_Capture.txt`` file.
        header_token: Text identifying the header row.
        sep: Column delimiter.

    Returns:
        DataFrame with at least ``Filename`` and ``Condition`` columns, as
        strings with surrounding whitespace removed.

    Raises:
        MetadataHeaderError: If the header row or a required column is missing.
    """
    path = Path(path)
    header_line = find_header_line(path, header_token)
    df = pd.read_csv(
        path,
        skiprows=header_line,
        sep=sep,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8",
        encoding_errors="replace",
        skip_blank_lines=True,
    )
    df.columns = [str(c).strip() for c in df.columns]
    for column in REQUIRED_COLUMNS:
        if column not in df.columns:
            raise MetadataHeaderError(str(path), column)

    df = df[df["Filename"].str.strip() != ""].reset_index(drop=True)
    for column in REQUIRED_COLUMNS:
        df[column] = df[column].str.strip()
    return df
