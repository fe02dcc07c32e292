"""Automatic threshold methods on 8-bit histograms.

``huang`` and ``max_entropy`` follow ImageJ's AutoThresholder, which
scikit-image does not provide; the remaining methods delegate to
``skimage.filters``. All methods assume a dark background: foreground is
everything strictly above the returned level.
"""

from __future__ import annotations

import numpy as np

SUPPORTED_METHODS = frozenset({"huang", "max_entropy", "otsu", "li", "triangle", "yen"})


def to_uint8(image: np.ndarray) -> np.ndarray:
    """Linearly stretch an image's min..max range onto 0..255.

    A constant image maps to all zeros.
    """
    image = np.asarray(image, dtype=np.float64)
    lo = float(image.min()) if image.size else 0.0
    hi = float(image.max()) if image.size else 0.0
    if hi <= lo:
        return np.zeros(image.shape, dtype=np.uint8)
    scaled = (image - lo) * (255.0 / (hi - lo))
    return np.clip(np.round(scaled), 0, 255).astype(np.uint8)


def histogram_256(image8: np.ndarray) -> np.ndarray:
    """256-bin histogram of an 8-bit image."""
    return np.bincount(np.asarray(image8, dtype=np.uint8).ravel(), minlength=256).astype(np.float64)


def threshold_huang(hist: np.ndarray) -> int:
    """Huang's fuzzy-entropy threshold (Huang & Wang, 1995).

    Args:
        hist: Histogram counts, one bin per gray level.

    Returns:
        Threshold gray level.
    """
    hist = np.asarray(hist, dtype=np.float64)
    nonzero = np.flatnonzero(hist)
    if nonzero.size == 0:
        return 0
    first, last = int(nonzero[0]), int(nonzero[-1])
    if first == last:
        return first

    levels = np.arange(hist.size, dtype=np.float64)
    S = np.cumsum(hist)
    W = np.cumsum(levels * hist)

    # Membership entropy as a function of |gray - mean|
    C = float(last - first)
    d = np.arange(1, last - first + 1, dtype=np.float64)
    mu = 1.0 / (1.0 + d / C)
    Smu = np.zeros(last - first + 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        Smu[1:] = np.nan_to_num(-mu * np.log(mu) - (1.0 - mu) * np.log(1.0 - mu))

    gray = np.arange(first, last + 1)
    counts = hist[first:last + 1]
    best_threshold = first
    best_entropy = np.inf
    for t in range(first, last + 1):
        mu_bg = int(round(W[t] / S[t]))
        below = gray <= t
        entropy = float(np.sum(Smu[np.abs(gray[below] - mu_bg)] * counts[below]))
        above_total = S[last] - S[t]
        if above_total > 0:
            mu_fg = int(round((W[last] - W[t]) / above_total))
            above = ~below
            entropy += float(np.sum(Smu[np.abs(gray[above] - mu_fg)] * counts[above]))
        if entropy < best_entropy:
            best_entropy = entropy
            best_threshold = t
    return best_threshold


def threshold_max_entropy(hist: np.ndarray) -> int:
    """Kapur-Sahoo-Wong maximum-entropy threshold.

    Args:
        hist: Histogram counts, one bin per gray level.

    Returns:
        Threshold gray level maximizing the summed background and
        object entropies.
    """
    hist = np.asarray(hist, dtype=np.float64)
    total = hist.sum()
    if total <= 0:
        return 0
    p = hist / total
    P1 = np.cumsum(p)
    P2 = 1.0 - P1

    eps = np.finfo(np.float64).eps
    valid_first = np.flatnonzero(np.abs(P1) >= eps)
    valid_last = np.flatnonzero(np.abs(P2) >= eps)
    if valid_first.size == 0 or valid_last.size == 0:
        return int(np.flatnonzero(hist)[0])
    first_bin = int(valid_first[0])
    last_bin = int(valid_last[-1])
    if last_bin < first_bin:
        return first_bin

    with np.errstate(divide="ignore", invalid="ignore"):
        plogp = np.where(p > 0, p * np.log(p), 0.0)
    A = np.cumsum(plogp)
    A_total = A[-1]

    its = np.arange(first_bin, last_bin + 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        ent_back = np.where(P1[its] > 0, np.log(P1[its]) - A[its] / P1[its], 0.0)
        ent_obj = np.where(
            P2[its] > 0, np.log(P2[its]) - (A_total - A[its]) / P2[its], 0.0,
        )
    total_entropy = ent_back + ent_obj
    # argmax keeps the first maximum, like a strict ">" scan
    return int(its[int(np.argmax(total_entropy))])


def compute_threshold(image8: np.ndarray, method: str) -> float:
    """Compute an automatic threshold level on an 8-bit image.

    Raises:
        ValueError: If method is unknown.
    """
    if method not in SUPPORTED_METHODS:
        raise ValueError(
            f"Unknown threshold method {method!r}. "
            f"Supported: {sorted(SUPPORTED_METHODS)}"
        )
    image8 = np.asarray(image8, dtype=np.uint8)
    if image8.size == 0 or image8.min() == image8.max():
        # Nothing to separate: everything is background
        return float(image8.max()) if image8.size else 0.0

    if method == "huang":
        return float(threshold_huang(histogram_256(image8)))
    if method == "max_entropy":
        return float(threshold_max_entropy(histogram_256(image8)))

    from skimage.filters import threshold_li, threshold_otsu, threshold_triangle, threshold_yen

    if method == "otsu":
        return float(threshold_otsu(image8))
    if method == "li":
        return float(threshold_li(image8))
    if method == "triangle":
        return float(threshold_triangle(image8))
    return float(threshold_yen(image8))


def binarize(
    image: np.ndarray,
    method: str,
    fixed_value: float | None = None,
) -> tuple[np.ndarray, float]:
    """Convert an image to 8-bit and threshold it with dark-background polarity.

    Args:
        image: Preprocessed intensity image.
        method: Automatic method, used when ``fixed_value`` is None.
        fixed_value: Explicit lower bound on the 8-bit scale. Pixels
            ``>= fixed_value`` are foreground.

    Returns:
        Tuple of (boolean mask, threshold level used).
    """
    image8 = to_uint8(image)
    if fixed_value is not None:
        return image8 >= fixed_value, float(fixed_value)
    level = compute_threshold(image8, method)
    return image8 > level, level
