"""Treatment vocabulary and name canonicalization."""

from __future__ import annotations

import re

_DOSES = ("(1)", "(3)", "(5)", "(10)", "(20)")


def _with_doses(name: str) -> tuple[str, ...]:
    return (name,) + tuple(f"{name}{dose}" for dose in _DOSES)


# Ordered grouping and plotting order for canonical treatments.
TREATMENT_LEVELS: tuple[str, ...] = (
    "Null",
    "Control oligo",
    "Control oligo(5)",
    "Control oligo(10)",
    "Alexa488",
    *_with_doses("miR-124-5p"),
    *_with_doses("miR-9-5p"),
    *_with_doses("miR-501-3p"),
    *_with_doses("miR-92a-1-5p"),
    "let7b",
    "LOX",
    "R848",
    "TL8-506",
)

# Lab codes -> canonical names. Look-aheads keep canonical names fixed points.
NAME_CODES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"miR#4(?!\d)"), "Control oligo"),
    (re.compile(r"miR#5(?!\d)"), "miR-124-5p"),
    (re.compile(r"miR#13(?!\d)"), "miR-9-5p"),
    (re.compile(r"miR#19(?!\d)"), "miR-501-3p"),
    (re.compile(r"miR#27(?!\d)"), "miR-92a-1-5p"),
    (re.compile(r"TL8(?!-506)"), "TL8-506"),
    (re.compile(r"miR92a"), "miR-92a-1-5p"),
    (re.compile(r"miR92(?![a\d])"), "miR-92a-1-5p"),
    (re.compile(r"miR124(?!\d)"), "miR-124-5p"),
    (re.compile(r"Alexa(?!488)"), "Alexa488"),
)

# Severity codes -> numeric dose suffixes.
DOSE_CODES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\(L\)"), "(1)"),
    (re.compile(r"\(LM\)"), "(3)"),
    (re.compile(r"\(M\)"), "(5)"),
    (re.compile(r"\(H\)"), "(10)"),
    (re.compile(r"\(XH\)"), "(20)"),
)


def canonicalize_treatment(name: str) -> str:
    """Map a recorded treatment name to its canonical spelling.

    Name codes are substituted first, then dose codes. Each pattern
    replaces at most its first occurrence. Names that match nothing are
    returned trimmed but otherwise unchanged.

    Examples:
        >>> canonicalize_treatment("miR92a(H)")
        'miR-92a-1-5p(10)'
        >>> canonicalize_treatment("Alexa488")
        'Alexa488'
    """
    output = name.strip()
    for pattern, replacement in NAME_CODES + DOSE_CODES:
        output = pattern.sub(replacement, output, count=1)
    return output


def parse_condition(raw: str) -> tuple[str, int | None]:
    """Split a ``Treatment_Field`` condition on its last underscore.

    Returns:
        Tuple of (canonical treatment, field). The field is None when it
        is absent or not an integer.
    """
    text = "" if raw is None else str(raw).strip()
    treatment, sep, field_text = text.rpartition("_")
    if not sep:
        return canonicalize_treatment(text), None
    try:
        field = int(field_text.strip())
    except ValueError:
        field = None
    return canonicalize_treatment(treatment), field


def is_known_treatment(name: str) -> bool:
    """Whether ``name`` is part of the canonical vocabulary."""
    return name in TREATMENT_LEVELS
