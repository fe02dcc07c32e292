"""Skeleton statistics: lengths, branches, end points and trees."""

from __future__ import annotations

import math

import numpy as np
from scipy import ndimage as ndi

from neurodeg.core.models import BinaryMask, SkeletonSummary
from neurodeg.segment.components import CONNECTIVITY_8

_NEIGHBOR_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int32)
_SQRT2 = math.sqrt(2.0)


def skeletonize_mask(mask: BinaryMask) -> np.ndarray:
    """Thin a neurite mask to one-pixel-wide centerlines."""
    from skimage.morphology import skeletonize

    if not mask.data.any():
        return np.zeros(mask.data.shape, dtype=bool)
    return skeletonize(mask.data).astype(bool)


def neighbor_counts(skeleton: np.ndarray) -> np.ndarray:
    """Number of 8-neighbours of each skeleton pixel (0 off the skeleton)."""
    skel = skeleton.astype(np.int32)
    counts = ndi.convolve(skel, _NEIGHBOR_KERNEL, mode="constant", cval=0)
    return counts * skel


def _edges(skeleton: np.ndarray) -> list[tuple[np.ndarray, np.ndarray, float]]:
    """Pixel-to-pixel steps along the skeleton.

    Each step is returned once as (index_a, index_b, length) with flat
    indices. A diagonal step is dropped when the two pixels are also
    joined through an orthogonal neighbour, so corners are not counted twice.
    """
    rows, cols = skeleton.shape
    padded = np.pad(skeleton, 1, constant_values=False)
    flat_index = np.arange(rows * cols).reshape(rows, cols)

    def shifted(dr: int, dc: int) -> np.ndarray:
        return padded[1 + dr:1 + dr + rows, 1 + dc:1 + dc + cols]

    edges: list[tuple[np.ndarray, np.ndarray, float]] = []
    steps = [
        (0, 1, 1.0, None),
        (1, 0, 1.0, None),
        (1, 1, _SQRT2, ((0, 1), (1, 0))),
        (1, -1, _SQRT2, ((0, -1), (1, 0))),
    ]
    for dr, dc, length, bridges in steps:
        present = skeleton & shifted(dr, dc)
        if bridges is not None:
            for br, bc in bridges:
                present &= ~shifted(br, bc)
        src_r, src_c = np.nonzero(present)
        if src_r.size == 0:
            continue
        a = flat_index[src_r, src_c]
        b = flat_index[src_r + dr, src_c + dc]
        edges.append((a, b, length))
    return edges


def summarize_skeleton(skeleton: np.ndarray, pixel_size: float = 1.0) -> SkeletonSummary:
    """Summarize a one-pixel-wide skeleton.

    Junction pixels (three or more neighbours) that touch each other form
    one junction. Removing them splits the skeleton into branches; a
    branch's length covers its own steps plus the steps that connect it
    to a junction. End points are pixels with at most one neighbour.

    Args:
        skeleton: 2D boolean skeleton.
        pixel_size: Calibrated edge length of one pixel.

    Returns:
        SkeletonSummary with lengths scaled by ``pixel_size``.
    """
    skeleton = np.asarray(skeleton, dtype=bool)
    if not skeleton.any():
        return SkeletonSummary()

    counts = neighbor_counts(skeleton)
    end_points = int(np.count_nonzero(skeleton & (counts <= 1)))
    junctions = skeleton & (counts >= 3)

    _, trees = ndi.label(skeleton, structure=CONNECTIVITY_8)

    slabs = skeleton & ~junctions
    branch_labels, n_branches = ndi.label(slabs, structure=CONNECTIVITY_8)
    if n_branches == 0:
        return SkeletonSummary(end_points=end_points, trees=int(trees))

    flat_labels = branch_labels.ravel()
    flat_junction = junctions.ravel()
    lengths = np.zeros(n_branches + 1, dtype=np.float64)

    for a, b, step in _edges(skeleton):
        la, lb = flat_labels[a], flat_labels[b]
        ja, jb = flat_junction[a], flat_junction[b]
        # Inside one branch
        same = (la == lb) & (la > 0)
        lengths += np.bincount(la[same], minlength=n_branches + 1) * step
        # Branch-to-junction connections
        a_to_j = (la > 0) & jb
        lengths += np.bincount(la[a_to_j], minlength=n_branches + 1) * step
        b_to_j = (lb > 0) & ja
        lengths += np.bincount(lb[b_to_j], minlength=n_branches + 1) * step

    branch_lengths = lengths[1:] * float(pixel_size)
    return SkeletonSummary(
        total_length=float(branch_lengths.sum()),
        max_branch_length=float(branch_lengths.max()),
        mean_branch_length=float(branch_lengths.mean()),
        end_points=end_points,
        branches=int(n_branches),
        trees=int(trees),
    )


def analyze_skeleton(mask: BinaryMask) -> SkeletonSummary:
    """Skeletonize a neurite mask and summarize it in calibrated units."""
    return summarize_skeleton(skeletonize_mask(mask), mask.pixel_size)
