"""Connected-component helpers shared by the segmentation stages."""

from __future__ import annotations

import math

import numpy as np
from scipy import ndimage as ndi

# 4- and 8-connectivity structuring elements
CONNECTIVITY_4 = ndi.generate_binary_structure(2, 1)
CONNECTIVITY_8 = ndi.generate_binary_structure(2, 2)


def structure_for(connectivity: int) -> np.ndarray:
    """Return the structuring element for connectivity 1 (4-conn) or 2 (8-conn)."""
    if connectivity == 1:
        return CONNECTIVITY_4
    if connectivity == 2:
        return CONNECTIVITY_8
    raise ValueError(f"connectivity must be 1 or 2, got {connectivity}")


def min_area_pixels(min_area: float, pixel_area: float) -> int:
    """Convert a calibrated area floor to a whole number of pixels.

    A component is kept when its pixel count times ``pixel_area`` is at
    least ``min_area``.
    """
    if min_area <= 0:
        return 0
    # Guard against float noise turning e.g. 20.000000001 into 21 pixels
    return int(math.ceil(min_area / pixel_area - 1e-9))


def filter_components(
    mask: np.ndarray,
    min_pixels: int,
    connectivity: int = 2,
) -> np.ndarray:
    """Remove connected components smaller than ``min_pixels``.

    Args:
        mask: 2D boolean array.
        min_pixels: Smallest component size (in pixels) to keep.
        connectivity: 1 for 4-connectivity, 2 for 8-connectivity.

    Returns:
        A new boolean mask.
    """
    mask = np.asarray(mask, dtype=bool)
    if min_pixels <= 1 or not mask.any():
        return mask.copy()
    labels, n = ndi.label(mask, structure=structure_for(connectivity))
    sizes = np.bincount(labels.ravel(), minlength=n + 1)
    keep = sizes >= min_pixels
    keep[0] = False
    return keep[labels]
